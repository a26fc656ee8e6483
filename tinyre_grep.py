import sys
import argparse
import logging

from graphviz import ExecutableNotFound

from tinyre_pattern import Pattern
from tinyre_match import MatchTimeout, is_match
from tinyre_tracer import trace_match, persist_trace, visualize_trace

# look ma no 're'!
# grep-alike on top of tinyre: print the lines that match a pattern.

LOGGER = logging.getLogger(__name__)


def select_lines(pattern, lines, invert=False, timeout=None):
    # Yield (line_number, line) for every selected line, 1-based.
    # A line that times out counts as not matching.
    for number, raw in enumerate(lines, start=1):
        line = raw.rstrip('\r\n')
        try:
            matched = is_match(pattern, line, timeout=timeout)
        except MatchTimeout:
            LOGGER.warning("Line %d: timed out, treating as no match", number)
            matched = False
        if matched != invert:
            yield number, line


def build_parser():
    parser = argparse.ArgumentParser(
        prog='tinyre-grep',
        description='Print lines matching a tiny regular expression '
                    '(^ $ . * and literals)')
    parser.add_argument('pattern', help='pattern to look for')
    parser.add_argument('input', nargs='?',
                        help='file path (defaults to stdin)')
    parser.add_argument(
        '-o', '--output', help='output file path (defaults to stdout)')
    parser.add_argument('-v', '--invert-match', action='store_true',
                        help='select non-matching lines')
    parser.add_argument('-c', '--count', action='store_true',
                        help='print only the number of selected lines')
    parser.add_argument('-n', '--line-number', action='store_true',
                        help='prefix each line with its line number')
    parser.add_argument('--timeout', type=float,
                        help='give up on a line after this many seconds')
    parser.add_argument('--trace-json', metavar='FILE',
                        help='write the match trace of the first line to FILE')
    parser.add_argument('--trace-graph', metavar='PATH',
                        help='render the same trace with Graphviz to PATH.png')
    parser.add_argument('--log-level', default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def main(argv=None):
    # usage:
    # tinyre-grep '^INT.*NIGHT$' script.fountain -n
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level,
                        format='%(levelname)s %(name)s: %(message)s')

    if args.timeout is not None and args.timeout <= 0:
        parser.error('--timeout must be positive')

    pattern = Pattern(args.pattern)

    # read
    # iterating the file splits on newlines only; str.splitlines() would
    # also break on form feeds and other separators
    try:
        if args.input:
            with open(args.input, encoding='utf-8') as f:
                lines = list(f)
        else:
            lines = list(sys.stdin)
    except OSError as exc:
        LOGGER.error("Cannot read %s: %s", args.input, exc)
        return 2

    if (args.trace_json or args.trace_graph) and not lines:
        LOGGER.warning("No input lines to trace")
    elif args.trace_json or args.trace_graph:
        try:
            _, events = trace_match(pattern, lines[0].rstrip('\r\n'),
                                    timeout=args.timeout)
        except MatchTimeout as exc:
            LOGGER.warning("Line 1: timed out while tracing, "
                           "writing the partial trace")
            events = exc.trace
        try:
            if args.trace_json:
                persist_trace(events, args.trace_json)
                LOGGER.info("Wrote %d trace events to %s",
                            len(events), args.trace_json)
            if args.trace_graph:
                rendered = visualize_trace(events, output_path=args.trace_graph)
                LOGGER.info("Rendered trace to %s", rendered)
        except (OSError, ExecutableNotFound) as exc:
            LOGGER.error("Cannot write trace: %s", exc)
            return 2

    # match
    selected = list(select_lines(pattern, lines, invert=args.invert_match,
                                 timeout=args.timeout))
    if args.count:
        out = f"{len(selected)}\n"
    elif args.line_number:
        out = ''.join(f"{n}:{line}\n" for n, line in selected)
    else:
        out = ''.join(f"{line}\n" for _, line in selected)

    # write
    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(out)
        except OSError as exc:
            LOGGER.error("Cannot write %s: %s", args.output, exc)
            return 2
    else:
        sys.stdout.write(out)

    return 0 if selected else 1


if __name__ == '__main__':
    sys.exit(main())
