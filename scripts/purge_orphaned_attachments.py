#!/usr/bin/env python3
"""
Maintenance helper: delete attachment files no stored email references.

Permanently deleting an email removes only its JSON record; the files it
pointed at stay in the attachments directory. This script finds those
leftovers and deletes them.

Usage
-----
# List what would be deleted
python scripts/purge_orphaned_attachments.py --dry-run

# Delete orphaned files under a specific data directory
python scripts/purge_orphaned_attachments.py --data-dir /srv/webmail/data

Environment / .env
------------------
WEBMAIL_DATA_DIR   Root of the flat-file store (default: ./data).
                   Overridden by --data-dir.

Requires the backend package to be installed (pip install -e .).
"""

import argparse
import sys
import textwrap

from app import db
from app.services.attachments import purge_orphaned_attachments


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="purge_orphaned_attachments.py",
        description=textwrap.dedent("""\
            Delete attachment files that no stored email references.

            Reads WEBMAIL_DATA_DIR from the environment or a .env file.
        """),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--data-dir",
        default=None,
        metavar="PATH",
        help="Data directory to clean (default: WEBMAIL_DATA_DIR or ./data)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="List orphaned files without deleting them.",
    )
    args = parser.parse_args(argv)

    if args.data_dir:
        db.configure(args.data_dir)

    if not db.ATTACHMENTS_DIR.is_dir():
        print(f"ERROR: No attachments directory at {db.ATTACHMENTS_DIR}", file=sys.stderr)
        return 1

    orphans = purge_orphaned_attachments(dry_run=args.dry_run)

    verb = "Would delete" if args.dry_run else "Deleted"
    for name in orphans:
        print(f"{verb}: {name}")
    print(f"\n{verb} {len(orphans)} orphaned attachment(s) in {db.ATTACHMENTS_DIR}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
