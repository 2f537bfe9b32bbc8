"""Write bulk upload templates to disk.

Usage:
  python scripts/generate_template.py --type medical --out templates/
  python scripts/generate_template.py --all --out templates/

Each template is an .xlsx with the expected headers and sample rows.
"""
import os
import sys
import argparse
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.bulk_upload.templates import TEMPLATE_TYPES, generate_template, template_filename  # noqa: E402

TYPES = list(TEMPLATE_TYPES)


def write_template(template_type: str, out_dir: str) -> str:
    os.makedirs(out_dir, exist_ok=True)
    path = os.path.join(out_dir, template_filename(template_type))
    with open(path, "wb") as f:
        f.write(generate_template(template_type))
    return path


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--type", type=str, default="general", help="store type: general, medical, restaurant, grocery, vegetables")
    parser.add_argument("--all", action="store_true", help="write every template type")
    parser.add_argument("--out", type=str, default="templates")
    args = parser.parse_args(argv)

    types = TYPES if args.all else [args.type]
    for t in types:
        print(f"Wrote {write_template(t, args.out)}")


if __name__ == "__main__":
    main()
