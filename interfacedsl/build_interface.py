#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from interfacedsl.errors import InterfaceError
from interfacedsl.exporter import IR_FILENAME, export_interfaces


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Compile the interface definitions of a Python module into a "
            "validated JSON call table."
        )
    )
    parser.add_argument(
        "definition",
        help="Path to the Python file holding @interface.definition classes.",
    )
    parser.add_argument(
        "--output",
        default=str(Path("build") / "interfacedsl_generated"),
        help="Directory where the generated IR will be written.",
    )
    parser.add_argument(
        "--runtime-placeholder",
        default="Runtime",
        help="Concrete type name substituted for `Self` in call argument types.",
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)

    definition_path = Path(args.definition).resolve()
    output_dir = Path(args.output).resolve()
    source = definition_path.read_text(encoding="utf-8")

    try:
        interfaces = export_interfaces(
            source,
            str(output_dir),
            source_path=str(definition_path),
            runtime_placeholder=args.runtime_placeholder,
        )
    except InterfaceError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    print(f"Compiled {len(interfaces)} interface definition(s): {output_dir / IR_FILENAME}")
    for interface in interfaces:
        print(f"- {interface.name}: {len(interface.calls)} call(s)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
