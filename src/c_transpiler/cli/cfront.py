"""
cfront - C Front End Command-Line Interface
===========================================

This module implements the command-line interface for the C front end.
It parses one preprocessed C file and writes the regenerated source, or
dumps the tokens or the AST for debugging.

Usage Examples
--------------
Regenerate to stdout:
    $ cfront main.i

With output file:
    $ cfront main.i -o main.out.c

Types declared in headers that were not preprocessed in:
    $ cfront -T size_t -T FILE main.i

Report every parse error instead of the first:
    $ cfront --keep-going main.i

Debug dumps:
    $ cfront --tokens main.i
    $ cfront --ast main.i
"""

import logging
from pathlib import Path
from typing import Optional

import click

from c_transpiler import __version__
from c_transpiler.frontend import CFrontend, FrontendOptions, ASTPrinter
from c_transpiler.cli.errors import handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output C file (default: stdout)",
)
@click.option(
    "-T", "--type-name",
    "type_names",
    multiple=True,
    help="Treat NAME as a typedef name from the start (can be repeated)",
)
@click.option(
    "--indent",
    type=click.IntRange(min=0),
    default=4,
    show_default=True,
    help="Spaces per indentation level in the regenerated source",
)
@click.option(
    "--keep-going",
    is_flag=True,
    help="Report all parse errors instead of stopping at the first",
)
@click.option(
    "--max-errors",
    type=click.IntRange(min=1),
    default=100,
    show_default=True,
    help="Give up after this many errors (with --keep-going)",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print tokens and exit (for debugging)",
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print AST and exit (for debugging)",
)
@click.option(
    "--check",
    is_flag=True,
    help="Parse only; report errors and write nothing",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="cfront")
def main(
    input_file: Path,
    output: Optional[Path],
    type_names: tuple[str, ...],
    indent: int,
    keep_going: bool,
    max_errors: int,
    tokens: bool,
    ast: bool,
    check: bool,
    verbose: bool,
) -> None:
    """
    Parse preprocessed C source and regenerate it.

    INPUT_FILE is a preprocessed C file (.i or .c without directives).

    The regenerated source is equivalent to the input: parsing it again
    yields the same syntax tree.

    \b
    Examples:
        cfront main.i                # Regenerated C on stdout
        cfront main.i -o out.c       # Specify output file
        cfront -T size_t main.i      # size_t comes from a header
        cfront --ast main.i          # Dump the syntax tree
        cfront -v main.i             # Debug logging
    """
    setup_logging(verbose)

    options = FrontendOptions(
        filename=str(input_file),
        predefined_types=list(type_names),
        indent=indent,
        max_errors=max_errors,
        keep_going=keep_going,
    )

    try:
        if verbose:
            click.echo(f"Parsing {input_file}...", err=True)
            if type_names:
                click.echo(f"Predefined types: {', '.join(type_names)}", err=True)

        source = input_file.read_text(encoding="utf-8")
        frontend = CFrontend(options)

        # Token dump mode
        if tokens:
            for token in frontend.tokenize(source, str(input_file)):
                click.echo(repr(token))
            return

        result = frontend.parse_source(source, str(input_file))

        for warning in result.warnings:
            click.echo(warning, err=True)

        # AST dump mode
        if ast:
            printer = ASTPrinter()
            click.echo(printer.print(result.ast))
            return

        if check:
            if verbose:
                click.echo(f"{input_file}: OK", err=True)
            return

        rendered = frontend.render(result.ast)

        if output is None:
            click.echo(rendered, nl=False)
        else:
            output.write_text(rendered, encoding="utf-8")
            click.echo(f"Wrote {input_file} -> {output}", err=True)

        if verbose:
            click.echo(f"Tokenized: {result.token_count} tokens", err=True)
            click.echo(f"Parsed: {len(result.ast.declarations)} declarations", err=True)
            click.echo(f"Typedefs: {len(result.registry.typedefs)}", err=True)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Parse")


if __name__ == "__main__":
    main()
