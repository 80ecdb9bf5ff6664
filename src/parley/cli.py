import typer

import parley.navigation
import parley.parser
import parley.play
from parley.config import setup_logging

app = typer.Typer()
app.add_typer(parley.parser.app)
app.add_typer(parley.navigation.app)
app.add_typer(parley.play.app)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at debug level")):
    setup_logging(verbose)


if __name__ == "__main__":
    app()
