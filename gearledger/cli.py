#!/usr/bin/env python3
"""
gear-ledger-import

Purpose:
  Push a roster or equipment-intake CSV to a running ledger API.
  The header row is sent as-is; the server locates columns by header
  synonyms (기수/cohort, 이름/name, 장비종류/type, 시리얼/serial, ...).

API:
  Base: http://127.0.0.1:8089/api/v1
  Roster: POST /import/roster       -> body: {"rows": [[...header...], [...], ...]}
  Intake: POST /import/equipment    -> same body
  Auth:   X-API-Key: <token>

Auth precedence:
  1) --token <value> (CLI)
  2) env GEAR_LEDGER_API_KEY

Examples:
  gear-ledger-import roster.csv
  gear-ledger-import intake.csv --kind equipment
  GEAR_LEDGER_API_KEY=secret gear-ledger-import roster.csv --base-url http://ledger:8089/api/v1

Exit codes:
  0 = success
  1 = handled application error (bad file, rejected import)
  2 = network/HTTP error
"""

from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import requests

from .core.csvrows import read_csv_rows

DEFAULT_BASE_URL = "http://127.0.0.1:8089/api/v1"
RESOURCE_PATHS = {"roster": "import/roster", "equipment": "import/equipment"}
TOKEN_ENV = "GEAR_LEDGER_API_KEY"


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Send a roster or equipment CSV to the ledger API.")
    p.add_argument("csv_file", type=Path, help="CSV export with a header row.")
    p.add_argument("--kind", choices=sorted(RESOURCE_PATHS), default="roster",
                   help="Which import to run (default: roster).")
    p.add_argument("--base-url", default=DEFAULT_BASE_URL,
                   help=f"Base API URL (default: {DEFAULT_BASE_URL})")
    p.add_argument("--token", default=None,
                   help=f"API key (X-API-Key). Overrides env {TOKEN_ENV}.")
    p.add_argument("--encoding", default="utf-8-sig",
                   help="CSV file encoding (default: utf-8-sig)")
    p.add_argument("--timeout", type=float, default=60.0,
                   help="HTTP timeout in seconds (default: 60)")
    p.add_argument("-v", "--verbose", action="store_true",
                   help="Verbose logging to stderr.")
    return p.parse_args(argv)


def resolve_token(cli_token: Optional[str]) -> Optional[str]:
    if cli_token:
        return cli_token
    return os.getenv(TOKEN_ENV) or None


def build_headers(token: Optional[str]) -> Dict[str, str]:
    headers = {"Accept": "application/json", "Content-Type": "application/json"}
    if token:
        headers["X-API-Key"] = token
    return headers


def vprint(enabled: bool, *args: Any) -> None:
    if enabled:
        print(*args, file=sys.stderr)


def load_rows(path: Path, encoding: str) -> List[List[str]]:
    rows = read_csv_rows(path.read_text(encoding=encoding))
    if len(rows) < 2:
        raise ValueError(f"{path} has no data rows")
    return rows


def post_rows(session: requests.Session, base_url: str, kind: str, rows: List[List[str]],
              token: Optional[str], timeout: float, verbose: bool) -> Dict[str, Any]:
    url = f"{base_url.rstrip('/')}/{RESOURCE_PATHS[kind]}"
    vprint(verbose, f"POST {url} rows={len(rows) - 1}")
    r = session.post(url, headers=build_headers(token), json={"rows": rows}, timeout=timeout)
    if r.status_code != 200:
        try:
            detail = json.dumps(r.json(), indent=2, ensure_ascii=False)
        except ValueError:
            detail = r.text
        raise requests.HTTPError(f"Import failed ({r.status_code}): {detail}", response=r)
    return r.json()


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    token = resolve_token(args.token)
    if not token:
        vprint(args.verbose, f"No API key supplied (use --token or env {TOKEN_ENV}); sending unauthenticated.")

    try:
        rows = load_rows(args.csv_file, args.encoding)
    except (OSError, UnicodeDecodeError, ValueError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    session = requests.Session()
    try:
        result = post_rows(session, args.base_url, args.kind, rows, token, args.timeout, args.verbose)
    except requests.exceptions.HTTPError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        response = e.response
        return 1 if response is not None and response.status_code < 500 else 2
    except requests.exceptions.RequestException as e:
        print(f"NETWORK_ERROR: {e}", file=sys.stderr)
        return 2

    print(json.dumps({"status": "imported", "kind": args.kind, "result": result}, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
