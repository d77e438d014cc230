import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, List, Optional

from toeic_splitter.core.config.settings import settings
from toeic_splitter.core.database.connection import init_db
from toeic_splitter.core.errors import SplitterError
from toeic_splitter.features.audio_cutting.service.api import list_part_audio, probe_duration
from toeic_splitter.features.exam_parts.service.api import get_part_spec
from toeic_splitter.features.split_metadata.service.api import get_all_metadata, get_part_metadata
from toeic_splitter.features.split_pipeline.service.api import auto_split_part, manual_split_part, split_full_run

logger = logging.getLogger("toeic_splitter")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="toeic-split", description="Split TOEIC Listening audio into per-question files")
    p.add_argument("--output_dir", help=f"Root for part folders (default: {settings.OUTPUT_DIR})")
    p.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    sub = p.add_subparsers(dest="command", required=True)

    auto = sub.add_parser("auto", help="Split one part using silence detection")
    auto.add_argument("audio", help="Recording of a single part")
    auto.add_argument("--part", type=int, required=True, help="Part number (1-4)")
    auto.add_argument("--name", help="Base name for output files (default: audio file name)")
    auto.add_argument("--cleanup", action="store_true", help="Delete the input file afterwards")

    manual = sub.add_parser("manual", help="Split one part at given timestamps")
    manual.add_argument("audio", help="Recording of a single part")
    manual.add_argument("--part", type=int, required=True, help="Part number (1-4)")
    manual.add_argument("--timestamps", required=True,
                        help="JSON list of {start, end}, or @path to a JSON file")
    manual.add_argument("--name", help="Base name for output files (default: audio file name)")
    manual.add_argument("--cleanup", action="store_true", help="Delete the input file afterwards")

    full = sub.add_parser("full", help="Split a full Listening recording into all parts")
    full.add_argument("audio", help="Full Listening Comprehension recording")
    full.add_argument("--name", help="Base name for output files (default: audio file name)")
    full.add_argument("--cleanup", action="store_true", help="Delete the input file afterwards")

    duration = sub.add_parser("duration", help="Print the duration of an audio file")
    duration.add_argument("audio")

    listing = sub.add_parser("list", help="List produced audio of a part")
    listing.add_argument("--part", type=int, required=True, help="Part number (1-4)")

    meta = sub.add_parser("metadata", help="Print recorded splits")
    meta.add_argument("--part", type=int, help="Only this part")
    return p


def _read_timestamps(raw: str) -> str:
    if raw.startswith("@"):
        return Path(raw[1:]).read_text(encoding="utf-8")
    return raw


def run_command(args: argparse.Namespace) -> Any:
    if args.output_dir:
        settings.OUTPUT_DIR = Path(args.output_dir)

    if args.command == "duration":
        return {"duration": probe_duration(args.audio)}

    if args.command == "list":
        spec = get_part_spec(args.part)
        return {"part": spec.part_number, "files": list_part_audio(spec.part_number)}

    init_db()

    if args.command == "metadata":
        if args.part is not None:
            spec = get_part_spec(args.part)
            return {f"part{spec.part_number}": get_part_metadata(spec.part_number)}
        return get_all_metadata()

    if args.command == "auto":
        return auto_split_part(args.audio, args.part, args.name, args.cleanup).to_dict()

    if args.command == "manual":
        return manual_split_part(
            args.audio, args.part, _read_timestamps(args.timestamps), args.name, args.cleanup
        ).to_dict()

    if args.command == "full":
        return split_full_run(args.audio, args.name, args.cleanup).to_dict()

    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr
    )

    try:
        payload = run_command(args)
    except SplitterError as exc:
        logger.error(exc.message)
        print(json.dumps(exc.to_dict(), ensure_ascii=False))
        return 1
    except OSError as exc:
        logger.error(f"Filesystem error: {exc}")
        print(json.dumps({"error": "io_error", "message": str(exc)}, ensure_ascii=False))
        return 1

    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
