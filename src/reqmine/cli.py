from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from reqmine.catalog import RuleCatalogs, catalogs_from_config
from reqmine.config import (
    REPORT_FORMATS,
    catalog_defaults,
    consistency_defaults,
    consistency_policy,
    merge_payload,
    report_defaults,
    report_format,
    scan_defaults,
    scan_policy,
    scoring_defaults,
    scoring_policy,
)
from reqmine.corpus import collect_corpus
from reqmine.exceptions import ReqmineError
from reqmine.pipeline import interrogate
from reqmine.reporting import ReportGenerator

app = typer.Typer(add_completion=False, help="Mine latent requirements from a codebase.")


def _echo_err(message: str) -> None:
    typer.echo(message, err=True)


def _resolve_format(fmt: str | None, root: Path, config: Path | None) -> str:
    if fmt is not None and fmt.strip().lower() not in REPORT_FORMATS:
        raise typer.BadParameter(
            f"Unknown format {fmt!r}; expected one of: {', '.join(REPORT_FORMATS)}"
        )
    section = merge_payload(
        {"format": fmt},
        report_defaults(root=root, config_path=config),
    )
    return report_format(section)


def _resolve_catalogs(root: Path, config: Path | None) -> RuleCatalogs:
    try:
        return catalogs_from_config(catalog_defaults(root=root, config_path=config))
    except ReqmineError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def scan(
    root: Path = typer.Argument(..., help="Directory to interrogate."),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: text, json, yaml or draft."
    ),
    output: Optional[Path] = typer.Option(None, "--output", "-o"),
    config: Optional[Path] = typer.Option(None, "--config"),
    jobs: int = typer.Option(1, "--jobs", "-j", min=1),
    quiet: bool = typer.Option(False, "--quiet", "-q"),
) -> None:
    """Scan ROOT and print a requirements triage report."""
    if not root.is_dir():
        raise typer.BadParameter(f"Directory not found: {root}")
    if config is not None and not config.is_file():
        raise typer.BadParameter(f"Config file not found: {config}")

    resolved_format = _resolve_format(fmt, root, config)
    catalogs = _resolve_catalogs(root, config)
    progress = None if quiet else _echo_err
    try:
        corpus = collect_corpus(
            root,
            scan_policy(scan_defaults(root=root, config_path=config)),
            on_skip=lambda path, reason: _echo_err(f"skipping {path}: {reason}"),
        )
        result = interrogate(
            corpus,
            catalogs=catalogs,
            scoring=scoring_policy(scoring_defaults(root=root, config_path=config)),
            consistency=consistency_policy(
                consistency_defaults(root=root, config_path=config)
            ),
            jobs=jobs,
            progress=progress,
        )
        rendered = ReportGenerator().render(result, source=str(root), fmt=resolved_format)
    except ReqmineError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if output is None:
        typer.echo(rendered)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered if rendered.endswith("\n") else rendered + "\n")
    if not quiet:
        _echo_err(f"report written to {output}")


@app.command()
def rules(
    root: Path = typer.Option(Path("."), "--root"),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    """List the pattern catalogue, including entries added by reqmine.toml."""
    catalogs = _resolve_catalogs(root, config)
    for definition in catalogs.patterns.signals:
        typer.echo(
            f"signal\t{definition.name}\t{definition.category.value}\t"
            f"{definition.confidence.value}\t{definition.implication}"
        )
    for definition in catalogs.patterns.debt_markers:
        typer.echo(
            f"debt\t{definition.name}\t{definition.category.value}\t"
            f"{definition.confidence.value}\t{definition.implication}"
        )
    for rule in catalogs.comments.markers:
        typer.echo(f"comment\t{rule.name}\t{rule.severity.value}\t{rule.confidence.value}")
    for tag in catalogs.comments.doc_tags:
        typer.echo(f"doc_tag\t{tag.tag}\t{tag.severity.value}\t{tag.implication}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
