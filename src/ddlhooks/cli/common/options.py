"""Common CLI options for the CLI."""

import typer

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Show debug logs (cache rebuilds, deparse gaps)",
)

StoreOpt = typer.Option(
    None,
    "--store",
    help="Registration store file (default: $DDLHOOKS_STORE_PATH)",
    dir_okay=False,
)

EventOpt = typer.Option(
    None,
    "--event",
    "-e",
    help="Lifecycle event: command_start, security_check, consistency_check, "
    "name_lookup, command_end",
)

RequiredEventOpt = typer.Option(
    ...,
    "--event",
    "-e",
    help="Lifecycle event: command_start, security_check, consistency_check, "
    "name_lookup, command_end",
)

TagOpt = typer.Option(
    [],
    "--tag",
    "-t",
    help="Command tag filter, e.g. 'CREATE TABLE'. This is reusable.",
    show_default=False,
)

CommandTagOpt = typer.Option(
    ...,
    "--tag",
    "-t",
    help="Command tag to look up, e.g. 'DROP INDEX'",
)

CallbackOpt = typer.Option(
    ...,
    "--callback",
    "-c",
    help="Callback reference, e.g. 'mypkg.hooks:audit'",
)

TimingOpt = typer.Option(
    "before",
    "--timing",
    help="before, after or 'instead of'",
)

IfExistsOpt = typer.Option(
    False,
    "--if-exists",
    help="Do not fail when the trigger does not exist",
)

ConfirmOpt = typer.Option(
    True,
    "--confirm/--no-confirm",
    help="Ask for confirmation before dropping triggers",
)

ModeOpt = typer.Option(
    "origin",
    "--mode",
    help="Firing mode: origin, always or replica",
)

SearchPathOpt = typer.Option(
    None,
    "--search-path",
    help="Comma-separated schema search path (default: $DDLHOOKS_SEARCH_PATH)",
)

RoleOpt = typer.Option(
    None,
    "--role",
    help="Session replication role: origin, replica or local",
)

SubKindOpt = typer.Option(
    None,
    "--sub-kind",
    help="Object kind for polymorphic statements, e.g. TABLE",
)

FireEventOpt = typer.Option(
    [],
    "--event",
    "-e",
    help="Fire only these events (default: the whole lifecycle). This is reusable.",
    show_default=False,
)

NodeFileArg = typer.Argument(
    ...,
    exists=True,
    dir_okay=False,
    readable=True,
    help="JSON file describing the command node",
)
