import argparse
import json
import sys
from datetime import datetime
from pathlib import Path

from .baseline import apply_baseline_file, total_baseline_states
from .config import CONVERTER_NAME, CONVERTER_VERSION, load_env
from .converter import combine_logs, convert_axe_to_sarif
from .errors import ConversionError


def log_progress(message):
    now = datetime.now().strftime("%H:%M:%S")
    print(f"[{now}] {message}", flush=True)


def _quiet(message):
    return None


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog=CONVERTER_NAME,
        description="Converts JSON files containing axe-core Result object(s) into SARIF files",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {CONVERTER_VERSION}")
    parser.add_argument(
        "-i",
        "--input-files",
        nargs="+",
        required=True,
        help=(
            "Input JSON file(s) containing axe-core Result object(s). Each file holds either a single "
            "results object or an array of results objects."
        ),
    )
    parser.add_argument(
        "-o",
        "--output-file",
        required=True,
        help="Output SARIF file. Every axe-core Result object becomes one SARIF run in this file.",
    )
    parser.add_argument(
        "-b",
        "--baseline-file",
        default=None,
        help=(
            "Baseline SARIF file (path or http(s) URL). Results in the output are annotated with a "
            "baselineState property. Should be a past output of the same version/options of this tool."
        ),
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enables verbose console output")
    parser.add_argument("-p", "--pretty", action="store_true", help="Includes line breaks and indentation")
    parser.add_argument("-f", "--force", action="store_true", help="Overwrites the output file if it exists")
    return parser.parse_args(argv)


def load_input_file(path):
    payload = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    # an array is what axe-cli writes; a single object is JSON.stringify(await axe.run())
    if isinstance(payload, list):
        return payload
    return [payload]


def convert_input_files(paths, log=_quiet):
    logs = []
    total = len(paths)
    for idx, path in enumerate(paths, start=1):
        log(f"Reading input file {idx}/{total} {path}")
        for axe_results in load_input_file(path):
            # baseline is applied once to the combined log, never per input
            logs.append(convert_axe_to_sarif(axe_results))
    log("Aggregating converted input file(s) into one SARIF log")
    return combine_logs(logs)


def write_output(path, content, force):
    mode = "w" if force else "x"
    with open(path, mode, encoding="utf-8") as f:
        f.write(content)


def main(argv=None):
    load_env()
    args = parse_args(argv)
    log = log_progress if args.verbose else _quiet

    try:
        combined = convert_input_files(args.input_files, log)
        if args.baseline_file is not None:
            log("Applying baseline file to aggregated SARIF log")
            combined = apply_baseline_file(combined, args.baseline_file)
            log(f"Baseline states: {dict(sorted(total_baseline_states(combined).items()))}")

        log("Formatting SARIF data into file contents")
        content = json.dumps(combined, indent=2 if args.pretty else None, ensure_ascii=False)

        log(f"Writing output file {args.output_file}")
        write_output(args.output_file, content, args.force)
    except FileExistsError:
        print(
            f"Error: Output file {args.output_file} already exists. Did you mean to use --force?",
            file=sys.stderr,
        )
        return 1
    except (ConversionError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    log("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
