"""CLI entrypoint: Typer app definition and command registration"""

import typer

from mdblocks.cli.commands import (
    check_cmd,
    export_cmd,
    history_cmd,
    init_cmd,
    reassemble_cmd,
    render_cmd,
    save_cmd,
    segment_cmd,
    show_cmd,
)


app = typer.Typer(name="mdblocks", no_args_is_help=True, help="Block segmentation and reassembly for MDX pages")

app.command(name="segment")(segment_cmd)
app.command(name="reassemble")(reassemble_cmd)
app.command(name="check")(check_cmd)
app.command(name="render")(render_cmd)
app.command(name="export")(export_cmd)
app.command(name="save")(save_cmd)
app.command(name="show")(show_cmd)
app.command(name="history")(history_cmd)
app.command(name="init")(init_cmd)
