#!/usr/bin/env python3
"""
Extract publication metadata from research-paper PDFs into JSON.

Behavior:
- Reads text from each PDF (first pages only) with pdfminer.six, or takes
  .txt files as already-extracted text.
- Optionally asks an LLM for the metadata, then always runs the pattern-based
  extractors and merges both (LLM fields win).
- Writes one JSON array with a record per input file.

Usage:
  python extract_metadata.py paper.pdf other.pdf --out output/metadata.json
  python extract_metadata.py --papers-dir papers
  python extract_metadata.py --papers-dir papers --no-ml      # patterns only
  python extract_metadata.py paper.pdf --backend openai --form

Optional env vars:
  PAPER2META_BACKEND         -> http | openai | local | none
  PAPER2META_ML              -> set to 0 to disable the LLM pass whatever the backend
  PAPER2META_INFERENCE_URL   -> inference endpoint for the http backend
  PAPER2META_API_KEY         -> bearer token for the http backend
  PAPER2META_MODEL           -> model name sent to the http backend
  PAPER2META_TIMEOUT         -> request timeout in seconds (default: 20)
  OPENAI_API_KEY / OPENAI_MODEL / OPENAI_BASE_URL -> openai backend
  LOCAL_MODEL                -> HuggingFace model ID for the local backend
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import traceback
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from tqdm import tqdm

from paper2meta.config import InferenceConfig
from paper2meta.exceptions import ConfigurationError, MetadataExtractionError
from paper2meta.extractor import extract_metadata, extract_pdf_metadata
from paper2meta.form import has_core_fields, populate_publication_form
from paper2meta.ml_extraction import MetadataInferenceAdapter, create_adapter
from paper2meta.models import PDFMetadata

# Load environment variables from root .env if it exists
load_dotenv(Path(__file__).parent / ".env")


def _truthy_env(name: str) -> bool:
    v = os.environ.get(name, "").strip().lower()
    return v not in {"", "0", "false", "no", "off"}


def _format_exc(e: Exception) -> str:
    msg = str(e).strip()
    if msg:
        return f"{type(e).__name__}: {msg}"
    return type(e).__name__


def _report_error(stage: str, path: Path, e: Exception) -> None:
    tqdm.write(f"[ERROR] {stage} failed for {path.name}: {_format_exc(e)}")
    if _truthy_env("PAPER2META_DEBUG_TRACE"):
        tqdm.write(traceback.format_exc())


def collect_inputs(paths: list[str], papers_dir: str | None) -> list[Path]:
    """PDF and .txt inputs from explicit paths plus an optional directory, in order."""
    inputs = [Path(p) for p in paths]
    if papers_dir:
        d = Path(papers_dir)
        if not d.is_dir():
            raise SystemExit(f"papers dir not found: {d}")
        inputs.extend(sorted(p for p in d.iterdir() if p.suffix.lower() in {".pdf", ".txt"}))
    return inputs


def extract_one(
    path: Path,
    adapter: MetadataInferenceAdapter | None,
    max_pages: int | None,
) -> PDFMetadata:
    if path.suffix.lower() == ".txt":
        return extract_metadata(path.read_text(encoding="utf-8"), adapter=adapter)
    return extract_pdf_metadata(path, adapter=adapter, max_pages=max_pages)


def run(
    inputs: list[Path],
    adapter: MetadataInferenceAdapter | None,
    max_pages: int | None = None,
    as_form: bool = False,
) -> list[dict[str, Any]]:
    """Extract every input; failures become records with an "error" entry."""
    records: list[dict[str, Any]] = []
    failures = 0
    sparse = 0

    for path in tqdm(inputs, desc="Extracting metadata"):
        try:
            metadata = extract_one(path, adapter, max_pages)
        except (MetadataExtractionError, OSError, UnicodeDecodeError) as e:
            failures += 1
            _report_error("extract", path, e)
            records.append({"source": path.as_posix(), "error": _format_exc(e)})
            continue

        if not has_core_fields(metadata):
            sparse += 1
            tqdm.write(
                f"[WARN] No title, authors or abstract found for {path.name}; "
                "please complete the form manually."
            )
        body = populate_publication_form(metadata) if as_form else metadata.to_dict()
        records.append({"source": path.as_posix(), "metadata": body})

    if sparse:
        tqdm.write(f"[WARN] Sparse results: {sparse}/{len(inputs)} files")
    if failures:
        tqdm.write(f"[WARN] Extraction failures: {failures}/{len(inputs)} files")
    return records


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    ap = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    ap.add_argument("inputs", nargs="*", help="PDF or .txt files to process")
    ap.add_argument("--papers-dir", default=None, help="Also process every PDF/.txt in this directory")
    ap.add_argument(
        "--out",
        default="output/metadata.json",
        help="Output JSON path (default: output/metadata.json, '-' for stdout)",
    )
    ap.add_argument("--max-pages", type=int, default=10, help="Pages read per PDF (0 = all pages)")
    ap.add_argument("--no-ml", action="store_true", help="Skip the LLM pass, use pattern extraction only")
    ap.add_argument(
        "--backend",
        choices=["http", "openai", "local", "none"],
        default=None,
        help="Override PAPER2META_BACKEND",
    )
    ap.add_argument(
        "--form",
        action="store_true",
        help="Emit publication form values (every field, tags joined) instead of raw metadata",
    )
    ap.add_argument("--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    inputs = collect_inputs(args.inputs, args.papers_dir)
    if not inputs:
        ap.error("no input files given (pass paths or --papers-dir)")
    max_pages = None if args.max_pages == 0 else args.max_pages

    try:
        if args.no_ml:
            config = InferenceConfig.disabled()
        else:
            config = InferenceConfig.from_env(backend=args.backend)
        adapter = create_adapter(config)
    except ConfigurationError as e:
        raise SystemExit(f"[ERROR] {e}")

    if adapter is None:
        print("[INFO] LLM pass disabled, using pattern extraction only")
    else:
        print(f"[INFO] Using {config.backend} inference ({config.model})")

    records = run(inputs, adapter, max_pages=max_pages, as_form=args.form)

    payload = json.dumps(records, indent=2, ensure_ascii=False)
    if args.out == "-":
        print(payload)
    else:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload + "\n", encoding="utf-8")
        print(f"Wrote: {out_path}")
    return 0 if len(records) > sum(1 for r in records if "error" in r) else 1


if __name__ == "__main__":
    raise SystemExit(main())
