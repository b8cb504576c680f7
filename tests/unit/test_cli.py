"""Unit tests for CLI commands."""

import signal
from unittest.mock import Mock, patch

from typer.testing import CliRunner

from node_labeler.cli import app
from node_labeler.exceptions import LookupAmbiguousError
from node_labeler.models.node import NodeTaint, ReconciliationResult

runner = CliRunner()


def test_version():
    """Test that version prints the package version."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.stdout


def test_parse_tag_label():
    """Label tags are shown with their target key."""
    result = runner.invoke(app, ["parse-tag", "kubernetes/aws-labeler/label/type", "web"])
    assert result.exit_code == 0
    assert "awslabeler.com/type" in result.stdout
    assert "label" in result.stdout


def test_parse_tag_taint():
    """Taint tags are shown with their effect."""
    result = runner.invoke(app, ["parse-tag", "kubernetes/aws-labeler/taint/gpu", "true:NoExecute"])
    assert result.exit_code == 0
    assert "NoExecute" in result.stdout


def test_parse_tag_unmanaged():
    """Unmanaged tags are reported as such."""
    result = runner.invoke(app, ["parse-tag", "Name", "web-1"])
    assert result.exit_code == 0
    assert "not managed" in result.stdout


def test_parse_tag_malformed():
    """Malformed tags fail with an error."""
    result = runner.invoke(app, ["parse-tag", "kubernetes/aws-labeler/taint/gpu", "true"])
    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_run_help():
    """Test that run command help works."""
    result = runner.invoke(app, ["run", "--help"])
    assert result.exit_code == 0
    assert "--kubeconfig" in result.stdout
    assert "--dry-run" in result.stdout


def test_run_no_kubeconfig():
    """Test that run fails gracefully without a kubeconfig."""
    result = runner.invoke(app, ["run", "--kubeconfig", "/nonexistent/config"])
    assert result.exit_code == 1
    assert "kubernetes configuration" in result.stdout.lower()


def test_run_missing_config_file():
    """Test that run fails gracefully with a missing config file."""
    result = runner.invoke(app, ["run", "--config", "nonexistent.yml"])
    assert result.exit_code == 1
    assert "Configuration file not found" in result.stdout


@patch("node_labeler.cli._build_labeler")
def test_sync_prints_result(mock_build):
    """Sync shows the merged labels and taints."""
    labeler = Mock()
    labeler.sync_node_by_name.return_value = ReconciliationResult(
        labels={"awslabeler.com/type": "web"},
        taints=[NodeTaint(key="awslabeler.com/gpu", value="true", effect="NoSchedule")],
        changed=True,
    )
    mock_build.return_value = labeler

    result = runner.invoke(app, ["sync", "node-1"])

    assert result.exit_code == 0
    labeler.sync_node_by_name.assert_called_once_with("node-1")
    assert "awslabeler.com/type" in result.stdout
    assert "Node updated" in result.stdout


@patch("node_labeler.cli._build_labeler")
def test_sync_dry_run_unchanged(mock_build):
    """Sync reports when nothing needs to change."""
    labeler = Mock()
    labeler.sync_node_by_name.return_value = ReconciliationResult(changed=False)
    mock_build.return_value = labeler

    result = runner.invoke(app, ["sync", "node-1", "--dry-run"])

    assert result.exit_code == 0
    assert mock_build.call_args[0][0].dry_run is True
    assert "No changes needed" in result.stdout


@patch("node_labeler.cli._build_labeler")
def test_sync_failure(mock_build):
    """Sync exits non-zero when the pass fails."""
    labeler = Mock()
    labeler.sync_node_by_name.side_effect = LookupAmbiguousError("Expected one instance")
    mock_build.return_value = labeler

    result = runner.invoke(app, ["sync", "node-1"])

    assert result.exit_code == 1
    assert "Expected one instance" in result.stdout


@patch("node_labeler.cli.signal.signal")
@patch("node_labeler.cli._build_labeler")
def test_run_stops_labeler_on_sigterm(mock_build, mock_signal):
    """SIGTERM asks the running labeler to stop."""
    labeler = Mock()
    mock_build.return_value = labeler

    result = runner.invoke(app, ["run"])

    assert result.exit_code == 0
    labeler.run.assert_called_once_with()
    signum, handler = mock_signal.call_args[0]
    assert signum == signal.SIGTERM

    handler(signal.SIGTERM, None)
    labeler.stop.assert_called_once_with()
