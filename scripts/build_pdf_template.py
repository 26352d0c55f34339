#!/usr/bin/env python3
"""Generate a fillable LOTO.pdf with every field the exporter writes.

Usage:
    python scripts/build_pdf_template.py                 # loto/assets/LOTO.pdf
    python scripts/build_pdf_template.py --out my.pdf
"""
import argparse
import os
import sys
sys.path.insert(0, ".")

from loto.services.pdf_template import build_template, template_field_names

DEFAULT_OUT = os.path.join("loto", "assets", "LOTO.pdf")


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--out", default=DEFAULT_OUT, help="output path")
    args = parser.parse_args()

    os.makedirs(os.path.dirname(args.out) or ".", exist_ok=True)
    build_template(args.out)
    print(f"Wrote {args.out} with {len(template_field_names())} fields")


if __name__ == "__main__":
    main()
