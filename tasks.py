# tasks.py
"""
Developer task runner using Invoke.
Run `inv --list` to see tasks.

Key tasks:
  inv parse --input <payload.json> [--provider ocr] [--strict]
  inv categorize --names "Fresh Banana,Mjölk" [--llm]
  inv trend --data <household.yaml> [--period weekly]
  inv budget --data <household.yaml>
  inv test
"""

from invoke import task
import sys


def _python():
    """Return the python executable inside the current venv."""
    return sys.executable or "python"


def _grocery(c, *args):
    c.run(f'"{_python()}" -m cli.grocery ' + " ".join(args), pty=False)


@task(
    help={
        "input": "Path to an OCR provider JSON response",
        "provider": "veryfi or ocr (default: veryfi)",
        "strict": "Fail when validation finds problems",
        "json": "Print JSON instead of text",
    }
)
def parse(c, input, provider="veryfi", strict=False, json=False):
    """Normalize + validate one OCR response."""
    args = ["parse", f'"{input}"', "--provider", provider]
    if strict:
        args.append("--strict")
    if json:
        args.append("--json")
    _grocery(c, *args)


@task(
    help={
        "names": "Comma-separated item names",
        "store": "Store name for the external predictor",
        "llm": "Use the Anthropic predictor (needs ANTHROPIC_API_KEY)",
    }
)
def categorize(c, names, store=None, llm=False):
    """Categorize item names."""
    args = ["categorize", *(f'"{n.strip()}"' for n in names.split(",") if n.strip())]
    if store:
        args += ["--store", f'"{store}"']
    if llm:
        args.append("--llm")
    _grocery(c, *args)


@task(
    help={
        "data": "YAML/JSON receipts file",
        "period": "daily, weekly or monthly (default: monthly)",
    }
)
def trend(c, data, period="monthly"):
    """Spending trend over a receipts file."""
    _grocery(c, "trend", f'"{data}"', "--period", period)


@task(help={"data": "YAML/JSON receipts file with a budget section"})
def budget(c, data):
    """Budget health over a receipts file."""
    _grocery(c, "budget", f'"{data}"')


@task
def test(c):
    """Run unit tests with pytest."""
    c.run(f'"{_python()}" -m pytest -q', pty=False)
