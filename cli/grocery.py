# cli/grocery.py
# Command-line tools for the household grocery spend tracker.
# - Normalize + validate one OCR payload (parse)
# - Categorize item names with keyword rules, optionally refined by an LLM (categorize)
# - Analytics over a receipts data file (trend, budget, prices, insights, summary)
#
# Examples:
#   grocery parse data/veryfi_response.json --provider veryfi --strict
#   grocery categorize "Fresh Banana" "Mjölk 3%" --store ICA
#   grocery trend data/household.yaml --period weekly
#   grocery budget data/household.yaml --today 2025-10-15
#   grocery prices data/household.yaml banana
#
# Notes:
# - Data files are YAML or JSON: {receipts: [{..., items: [...]}], budget: {...}}
# - Exit codes: 0 ok, 1 validation failed (--strict), 2 bad input data, 3 parse error.

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import yaml

from adapters.base import apply_store_specific_parsing
from adapters.generic import parse_ocr_receipt
from adapters.veryfi import parse_veryfi_receipt
from analytics.calculations import (
    calculate_average_basket,
    calculate_budget_progress,
    calculate_by_category,
    calculate_by_store,
    calculate_carbon_footprint,
    calculate_organic_percentage,
    filter_receipts_by_date_range,
    get_budget_period_dates,
)
from analytics.engine import (
    analyze_category_spending,
    assess_budget_health,
    calculate_spending_trend,
    compare_prices,
    generate_spending_insights,
)
from categorizer.rules import get_category_display_name
from categorizer.service import CategorizerService
from config.loader import load_config, section
from gst_core.errors import ConfigError, ReceiptParseError
from gst_core.models import (
    ALL_CATEGORIES,
    DEFAULT_CURRENCY,
    Budget,
    CategorizableItem,
    Receipt,
    ReceiptItem,
    TrendDirection,
    to_dict,
)
from gst_utils.formatters import format_currency, snake_to_title, truncate
from gst_utils.logging_setup import resolve_level, setup_logging
from parser.validator import validate_parsed_receipt

LOGGER = logging.getLogger("cli")

EXIT_INVALID = 1
EXIT_BAD_DATA = 2
EXIT_PARSE_ERROR = 3

PARSERS = {
    "veryfi": parse_veryfi_receipt,
    "ocr": parse_ocr_receipt,
}


# ---------- helpers ----------
def _fail(msg: str, code: int) -> None:
    click.echo(f"[error] {msg}", err=True)
    raise SystemExit(code)


def _echo_json(obj: Any) -> None:
    click.echo(json.dumps(to_dict(obj), indent=2, ensure_ascii=False, default=str))


def _read_document(path: str) -> Any:
    """YAML or JSON (JSON is valid YAML) -> python objects."""
    try:
        return yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        _fail(f"Could not read {path}: {e}", EXIT_BAD_DATA)


def _load_dataset(path: str) -> Tuple[List[Receipt], List[ReceiptItem], Optional[Budget]]:
    doc = _read_document(path)
    if not isinstance(doc, dict):
        _fail(f"{path}: expected a mapping with a 'receipts' list", EXIT_BAD_DATA)
    try:
        receipts = [Receipt.from_dict(r) for r in doc.get("receipts") or []]
        budget = Budget.from_dict(doc["budget"]) if doc.get("budget") else None
    except (KeyError, ValueError, TypeError, AttributeError) as e:
        _fail(f"{path}: bad receipt data ({e!r})", EXIT_BAD_DATA)
    for r in receipts:
        if r.purchase_date is None:
            _fail(f"{path}: receipt {r.id or '?'} has no usable purchase_date", EXIT_BAD_DATA)
    items = [i for r in receipts for i in r.items]
    LOGGER.debug("Loaded %d receipt(s), %d item(s) from %s", len(receipts), len(items), path)
    return receipts, items, budget


def _require_budget(budget: Optional[Budget], path: str) -> Budget:
    if budget is None:
        _fail(f"{path}: no 'budget' section", EXIT_BAD_DATA)
    return budget


def _currency(ctx: click.Context) -> str:
    return section(ctx.obj["config"], "receipt").get("default_currency", DEFAULT_CURRENCY)


# ----------------------------- CLI -----------------------------
@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to config.toml (default: repo root).",
)
@click.option("--quiet", is_flag=True, help="Only warnings/errors.")
@click.option("--verbose", is_flag=True, help="Verbose logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], quiet: bool, verbose: bool) -> None:
    """Grocery spend tracker CLI."""
    try:
        cfg: Dict[str, Any] = load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as e:
        if config_path:
            _fail(str(e), EXIT_BAD_DATA)
        cfg = {}
    except ConfigError as e:
        _fail(str(e), EXIT_BAD_DATA)

    try:
        configured = section(cfg, "logging").get("level", "INFO")
    except ConfigError as e:
        _fail(str(e), EXIT_BAD_DATA)
    setup_logging(resolve_level(configured, quiet=quiet, verbose=verbose))

    ctx.ensure_object(dict)
    ctx.obj["config"] = cfg


@cli.command("parse")
@click.argument("payload", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--provider",
    type=click.Choice(sorted(PARSERS)),
    default="veryfi",
    show_default=True,
    help="Shape of the OCR response.",
)
@click.option("--json", "output_json", is_flag=True, help="Output JSON.")
@click.option("--strict", is_flag=True, help="Exit 1 when validation fails.")
@click.pass_context
def parse_cmd(ctx: click.Context, payload: str, provider: str, output_json: bool, strict: bool) -> None:
    """Normalize one OCR provider response and validate it."""
    data = _read_document(payload)
    if not isinstance(data, dict):
        _fail(f"{payload}: expected a JSON object", EXIT_BAD_DATA)

    try:
        receipt = PARSERS[provider](data, default_currency=_currency(ctx))
    except ReceiptParseError as e:
        _fail(str(e), EXIT_PARSE_ERROR)
    receipt = apply_store_specific_parsing(receipt)
    result = validate_parsed_receipt(receipt)

    if output_json:
        out = to_dict(receipt)
        out.pop("raw_data", None)
        _echo_json({"receipt": out, "validation": result})
    else:
        click.echo(f"Store    : {receipt.store_name}")
        click.echo(f"Date     : {receipt.purchase_date.isoformat()}")
        click.echo(f"Total    : {format_currency(receipt.total_amount, receipt.currency)}")
        click.echo(f"Items    : {len(receipt.items)}")
        for item in receipt.items:
            click.echo(
                f"  - {truncate(item.name, 32):<32} {item.quantity:g} x "
                f"{format_currency(item.unit_price, receipt.currency)}"
            )
        click.echo(f"Valid    : {'yes' if result.is_valid else 'no'}")
        for err in result.errors:
            click.echo(f"[warn] {err}")

    if strict and not result.is_valid:
        raise SystemExit(EXIT_INVALID)


@cli.command("categorize")
@click.argument("names", nargs=-1, required=True)
@click.option("--store", default=None, help="Store name passed to the external predictor.")
@click.option("--llm", is_flag=True, help="Refine keyword rules with the Anthropic predictor.")
@click.option("--json", "output_json", is_flag=True, help="Output JSON.")
@click.pass_context
def categorize_cmd(
    ctx: click.Context, names: Tuple[str, ...], store: Optional[str], llm: bool, output_json: bool
) -> None:
    """Assign a grocery category to each item name."""
    svc = CategorizerService.from_config(ctx.obj["config"], use_llm=llm)
    items = [CategorizableItem(name=n) for n in names]
    preds, external_failed = svc.categorize_with_status(items, store)
    if external_failed:
        click.echo("[warn] external predictor unavailable; used keyword rules only.", err=True)

    if output_json:
        _echo_json([{"item": n, **to_dict(p)} for n, p in zip(names, preds)])
        return
    for n, p in zip(names, preds):
        click.echo(
            f"{truncate(n, 32):<32} -> {get_category_display_name(p.category)} "
            f"({p.confidence:.2f}) {p.reasoning or ''}".rstrip()
        )


@cli.command("categories")
@click.option("--locale", type=click.Choice(["en", "sv"]), default="en", show_default=True)
def categories_cmd(locale: str) -> None:
    """List the product categories."""
    for c in ALL_CATEGORIES:
        click.echo(f"{c.value:<18} {get_category_display_name(c, locale)}")


@cli.command("trend")
@click.argument("data", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--period",
    type=click.Choice(["daily", "weekly", "monthly"]),
    default="monthly",
    show_default=True,
)
@click.option("--json", "output_json", is_flag=True, help="Output JSON.")
@click.pass_context
def trend_cmd(ctx: click.Context, data: str, period: str, output_json: bool) -> None:
    """Spending per period bucket and its direction."""
    receipts, _, _ = _load_dataset(data)
    analysis = calculate_spending_trend(receipts, period)
    if output_json:
        _echo_json(analysis)
        return

    cur = _currency(ctx)
    for dp in analysis.data_points:
        click.echo(f"{dp.date.isoformat()}  {format_currency(dp.amount, cur):>14}")
    change = (
        f" ({analysis.change_percentage:+.1f}%)"
        if analysis.trend is not TrendDirection.STABLE
        else ""
    )
    click.echo(f"Average : {format_currency(analysis.average, cur)}")
    click.echo(f"Trend   : {analysis.trend.value}{change}")


@cli.command("budget")
@click.argument("data", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Evaluate as of this date (default: now).",
)
@click.option("--json", "output_json", is_flag=True, help="Output JSON.")
@click.pass_context
def budget_cmd(ctx: click.Context, data: str, today, output_json: bool) -> None:
    """Budget health for the period containing the budget's start date."""
    receipts, _, budget = _load_dataset(data)
    budget = _require_budget(budget, data)

    start, end = get_budget_period_dates(budget.period, budget.start_date)
    in_period = filter_receipts_by_date_range(receipts, start, end)
    health = assess_budget_health(budget, in_period, today)
    progress = calculate_budget_progress(in_period, budget.amount)

    if output_json:
        _echo_json({"health": health, "progress": progress})
        return

    cur = _currency(ctx)
    click.echo(f"Budget    : {budget.name} ({budget.period.value}, {start.date()} .. {end.date()})")
    click.echo(
        f"Spent     : {format_currency(progress.spent, cur)} of "
        f"{format_currency(progress.budget, cur)} ({progress.percentage:.0f}%)"
    )
    click.echo(f"Status    : {health.status.value}")
    click.echo(f"Days left : {health.days_remaining}")
    for rec in health.recommendations:
        click.echo(f"[tip] {rec}")


@cli.command("prices")
@click.argument("data", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.argument("item")
@click.option("--json", "output_json", is_flag=True, help="Output JSON.")
@click.pass_context
def prices_cmd(ctx: click.Context, data: str, item: str, output_json: bool) -> None:
    """Compare what an item cost across receipts and stores."""
    receipts, items, _ = _load_dataset(data)
    cmp = compare_prices(item, items, receipts)
    if cmp is None:
        click.echo(f"[info] no purchases matching '{item}'.")
        return
    if output_json:
        _echo_json(cmp)
        return

    cur = _currency(ctx)
    click.echo(f"Item    : {cmp.item_name}")
    click.echo(f"Current : {format_currency(cmp.current_price, cur)}")
    click.echo(f"Average : {format_currency(cmp.average_price, cur)}")
    click.echo(
        f"Range   : {format_currency(cmp.lowest_price, cur)} .. "
        f"{format_currency(cmp.highest_price, cur)}"
    )
    for s in cmp.stores:
        when = s.date.date() if hasattr(s.date, "date") else s.date
        click.echo(f"  - {s.store_name:<20} {format_currency(s.price, cur):>12}  {when}")


@cli.command("insights")
@click.argument("data", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--json", "output_json", is_flag=True, help="Output JSON.")
@click.pass_context
def insights_cmd(ctx: click.Context, data: str, output_json: bool) -> None:
    """Category breakdown plus spending tips."""
    receipts, items, budget = _load_dataset(data)
    budget = _require_budget(budget, data)
    categories = analyze_category_spending(items)
    insights = generate_spending_insights(receipts, items, budget)

    if output_json:
        _echo_json({"categories": categories, "insights": insights})
        return

    cur = _currency(ctx)
    for c in categories:
        click.echo(
            f"{get_category_display_name(c.category):<22} "
            f"{format_currency(c.total_spent, cur):>14}  {c.percentage_of_budget:5.1f}%"
        )
    if not insights:
        click.echo("[info] no insights for this data.")
    for ins in insights:
        click.echo(f"[{ins.type.value}] {ins.title}: {ins.description}")


@cli.command("summary")
@click.argument("data", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.pass_context
def summary_cmd(ctx: click.Context, data: str) -> None:
    """Totals by store and category, basket size, organic share, carbon."""
    receipts, items, _ = _load_dataset(data)
    cur = _currency(ctx)

    click.echo(f"Receipts       : {len(receipts)}")
    click.echo(f"Average basket : {format_currency(calculate_average_basket(receipts), cur)}")
    click.echo(f"Organic share  : {calculate_organic_percentage(items):.1f}%")
    click.echo(f"Carbon         : {calculate_carbon_footprint(items):.0f} g CO2e")
    click.echo("By store:")
    for store, amount in sorted(calculate_by_store(receipts).items(), key=lambda kv: -kv[1]):
        click.echo(f"  - {store:<20} {format_currency(amount, cur):>14}")
    click.echo("By category:")
    for cat, amount in sorted(calculate_by_category(items).items(), key=lambda kv: -kv[1]):
        click.echo(f"  - {snake_to_title(cat.value):<20} {format_currency(amount, cur):>14}")


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
