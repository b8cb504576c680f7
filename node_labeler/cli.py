"""Main CLI entry point for the node labeler."""

import signal
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from node_labeler.config import LabelerConfig
from node_labeler.exceptions import ConfigurationError, NodeLabelerError, TagParseError
from node_labeler.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="aws-node-labeler",
    help="Propagate EC2 instance tags to Kubernetes node labels and taints",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Logging level (default: $LOG_LEVEL or INFO)"
    ),
    log_file: str | None = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Global options for all commands."""
    log_path = Path(log_file) if log_file else None
    setup_logging(level=log_level, verbose=verbose, log_file=log_path)
    logger.debug("Logging initialized")


def _load_config(
    config_path: str | None,
    kubeconfig: str | None,
    in_cluster: bool | None,
    dry_run: bool | None,
) -> LabelerConfig:
    cfg = LabelerConfig.load(config_path) if config_path else LabelerConfig()
    overrides = {}
    if kubeconfig is not None:
        overrides["kubeconfig"] = kubeconfig
    if in_cluster is not None:
        overrides["in_cluster"] = in_cluster
    if dry_run is not None:
        overrides["dry_run"] = dry_run
    return cfg.model_copy(update=overrides)


def _build_labeler(cfg: LabelerConfig):
    from node_labeler.controller import NodeLabeler, load_core_api
    from node_labeler.ec2 import EC2InstanceLookup

    return NodeLabeler(load_core_api(cfg), EC2InstanceLookup(), cfg)


def _print_error(e: NodeLabelerError) -> None:
    console.print(f"[red]Error:[/red] {e.message}")
    if e.details:
        console.print(f"\n{e.details}")


@app.command()
def version() -> None:
    """Show version information."""
    from node_labeler import __version__

    typer.echo(f"aws-node-labeler version {__version__}")


@app.command()
def run(
    config_path: str | None = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Path to kubeconfig"),
    in_cluster: bool | None = typer.Option(
        None, "--in-cluster/--no-in-cluster", help="Use the pod service account"
    ),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Compute changes without updating nodes"
    ),
) -> None:
    """
    Watch the cluster and label new nodes from their EC2 tags.

    Every node added to the cluster is looked up in EC2, and tags under
    kubernetes/aws-labeler/ are copied to the node as awslabeler.com/ labels
    and taints. Runs until interrupted.
    """
    try:
        cfg = _load_config(config_path, kubeconfig, in_cluster, dry_run)
        labeler = _build_labeler(cfg)
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e.message}")
        _print_error(e)
        raise typer.Exit(code=1)

    def _stop(signum, frame):
        logger.info(f"Received signal {signum}, stopping")
        labeler.stop()

    signal.signal(signal.SIGTERM, _stop)
    logger.info("The k8s aws labeler started")

    try:
        labeler.run()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except NodeLabelerError as e:
        logger.error(f"Controller stopped: {e.message}")
        _print_error(e)
        raise typer.Exit(code=1)


@app.command()
def sync(
    node_name: str = typer.Argument(..., help="Name of the node to label"),
    config_path: str | None = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    kubeconfig: str | None = typer.Option(None, "--kubeconfig", help="Path to kubeconfig"),
    in_cluster: bool | None = typer.Option(
        None, "--in-cluster/--no-in-cluster", help="Use the pod service account"
    ),
    dry_run: bool | None = typer.Option(
        None, "--dry-run/--no-dry-run", help="Compute changes without updating the node"
    ),
) -> None:
    """
    Run a single labeling pass for one node.
    """
    try:
        cfg = _load_config(config_path, kubeconfig, in_cluster, dry_run)
        labeler = _build_labeler(cfg)
        result = labeler.sync_node_by_name(node_name)
    except NodeLabelerError as e:
        logger.error(f"Sync of {node_name} failed: {e.message}")
        _print_error(e)
        raise typer.Exit(code=1)

    table = Table(title=f"Node {node_name}")
    table.add_column("Kind", style="cyan")
    table.add_column("Key", style="magenta")
    table.add_column("Value", style="green")
    for key, value in sorted(result.labels.items()):
        table.add_row("label", key, value)
    for taint in result.taints:
        table.add_row("taint", taint.key, f"{taint.value or ''}:{taint.effect.value}")
    console.print(table)

    if not result.changed:
        console.print("[yellow]No changes needed[/yellow]")
    elif cfg.dry_run:
        console.print("[yellow]Dry run, node not updated[/yellow]")
    else:
        console.print("[green]✓ Node updated[/green]")


@app.command("parse-tag")
def parse_tag_command(
    key: str = typer.Argument(..., help="EC2 tag key"),
    value: str = typer.Argument(..., help="EC2 tag value"),
) -> None:
    """
    Show the label or taint an EC2 tag translates to.
    """
    from node_labeler.models.tag import CloudTag, TaintDirective
    from node_labeler.tags import parse_tag

    try:
        directive = parse_tag(CloudTag(key=key, value=value))
    except TagParseError as e:
        _print_error(e)
        raise typer.Exit(code=1)

    if directive is None:
        console.print(f"[yellow]Tag {key} is not managed by the labeler[/yellow]")
        return

    table = Table()
    table.add_column("Kind", style="cyan")
    table.add_column("Key", style="magenta")
    table.add_column("Value", style="green")
    table.add_column("Effect", style="yellow")
    effect = directive.effect.value if isinstance(directive, TaintDirective) else ""
    table.add_row(directive.kind.value, directive.key, directive.value, effect)
    console.print(table)


if __name__ == "__main__":
    app()
