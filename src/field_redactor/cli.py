"""CLI interface for field-redactor.

Usage:
    # Log a sample company through the redacting pipeline
    python -m field_redactor.cli demo --mode both --format console

    # Show which fields of a class are redacted
    python -m field_redactor.cli inspect myapp.models:Person
"""

from __future__ import annotations
import argparse
import importlib
import json
import sys
from dataclasses import dataclass, field
from typing import Annotated

from .config import MODES, create_processor, load_config, load_from_yaml
from .logger import get_logger, setup_logging
from .markers import Redacted
from .registry import discover_fields
from .value import RedactedValue


# ── Demo models ──────────────────────────────────────────────────────

@dataclass
class Person:
    name: str | None = None
    social_security_number: Annotated[str | None, Redacted] = None
    emails: Annotated[list[str] | None, Redacted] = None
    # Values logged directly as scalars must be wrapped as well
    username: Annotated[RedactedValue[str] | None, Redacted] = None
    password: Annotated[RedactedValue[str] | None, Redacted] = None


@dataclass
class Company:
    name: str
    employees: list[Person] = field(default_factory=list)


def create_company() -> Company:
    return Company("Fake Inc.", [
        Person(
            name="John Doe",
            social_security_number="123-45-6789",
            emails=["john.doe@fake.com", "j.doe@fake.com"],
            username=RedactedValue("j-doe"),
            password=RedactedValue("P@ssw0rd!"),
        ),
        Person(name="Jane Doe"),
    ])


# ── Commands ─────────────────────────────────────────────────────────

def cmd_demo(args: argparse.Namespace) -> None:
    """Log the sample company and its employees."""
    if args.config:
        cfg = load_from_yaml(args.config)
    else:
        cfg = load_config({"mode": args.mode, "redacted_text": args.redacted_text})
    setup_logging(args.log_level, args.format, create_processor(cfg))
    log = get_logger("field_redactor.demo")

    for _ in range(args.count):
        company = create_company()
        log.info("logging company", company=company)
        for person in company.employees:
            log.info("logging person", person=person)
            log.info("wrapped scalars", username=person.username, password=person.password)
            log.info("stringified person", **{"$person": person})
            # Read directly, the values carry no field metadata and are not redacted
            log.info("unwrapped fields", ssn=person.social_security_number, emails=person.emails)


def cmd_inspect(args: argparse.Namespace) -> None:
    """Print the fields of a class and whether each is redacted."""
    module_name, _, attr = args.target.partition(":")
    if not attr:
        sys.stderr.write("target must look like module:Class\n")
        sys.exit(2)
    cls = importlib.import_module(module_name)
    for part in attr.split("."):
        cls = getattr(cls, part)

    output = {
        "type": f"{cls.__module__}.{cls.__qualname__}",
        "fields": [
            {"name": d.name, "redacted": d.is_sensitive, "readable": d.readable}
            for d in discover_fields(cls)
        ],
    }
    json.dump(output, sys.stdout, indent=2)
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="field_redactor",
        description="Field-level redaction for structured logs",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    demo = sub.add_parser("demo", help="Log sample data through the redactor")
    demo.add_argument("--mode", choices=MODES, default="destructure", help="Where redaction happens")
    demo.add_argument("--redacted-text", default=None, help="Placeholder text")
    demo.add_argument("--format", choices=("json", "console"), default="json", help="Output format")
    demo.add_argument("--log-level", default="INFO", help="Logging level")
    demo.add_argument("--count", type=int, default=1, help="How many times to log the sample")
    demo.add_argument("--config", default=None, help="YAML config file (overrides --mode/--redacted-text)")

    inspect_ = sub.add_parser("inspect", help="Show redacted fields of a class")
    inspect_.add_argument("target", help="module:Class")

    args = parser.parse_args(argv)

    cmds = {
        "demo": cmd_demo,
        "inspect": cmd_inspect,
    }
    cmds[args.command](args)


if __name__ == "__main__":
    main()
