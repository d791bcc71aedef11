#!/usr/bin/env python3
"""
LFSR entropy search over a reference random sample

Usage:
  lfsr-entropy [--data PATH] [search [--data PATH]] [--seed {one,tap}] [--score {entropy,compressed}]
               [--compressor NAME] [--masks A:B] [--taps A:B] [--window N] [--progress]
  lfsr-entropy --fetch                       # same as: lfsr-entropy fetch
  lfsr-entropy fetch [--out PATH] [--url URL] [--bits N]
  lfsr-entropy histogram [--out histogram.png] [--width 8]
"""

import argparse
import sys

from .compress import COMPRESSORS
from .histogram import DEFAULT_PLOT, cycle_histogram, plot_histogram, sorted_buckets
from .sample import (DEFAULT_DATA, DEFAULT_MIN_BITS, DEFAULT_QUANTUM, DEFAULT_TIMEOUT,
                     QRNG_URL, fetch_sample, load_sample)
from .search import (DEFAULT_BATCH, DEFAULT_WINDOW, FULL_RANGE, SCORE_POLICIES, SEED_POLICIES,
                     Candidate, baseline, search, skip_repeated_masks)


def parse_range(s: str) -> range:
    """'A:B' (hex, binary or decimal bounds, either may be omitted) -> range(A, B) within 0..65536."""
    try:
        lo, sep, hi = s.partition(":")
        if not sep:
            start = int(lo, 0)
            return range(start, start + 1)
        start = int(lo, 0) if lo.strip() else FULL_RANGE.start
        stop = int(hi, 0) if hi.strip() else FULL_RANGE.stop
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid range {s!r}: expected A:B")
    if not 0 <= start <= stop <= FULL_RANGE.stop:
        raise argparse.ArgumentTypeError(f"Range {s!r} must lie within 0:{FULL_RANGE.stop}")
    return range(start, stop)


def print_candidate(c: Candidate) -> None:
    line = (f"[+] mask=0x{c.mask:04x} tap=0x{c.tap:04x} seed=0x{c.seed:04x} "
            f"entropy={c.entropy:.6f} saved={c.bits_saved:.3f}")
    if c.compressed_delta is not None:
        line += f" compressed={c.compressed_delta:+d}"
    print(line, flush=True)


def build_argparser():
    p = argparse.ArgumentParser(prog="lfsr-entropy",
                                description="Search LFSR keystreams that lower the entropy of a random sample.")
    p.add_argument("--fetch", action="store_true", help="Fetch quantum random bits instead of searching")
    p.add_argument("--data", default=DEFAULT_DATA, help=f"Sample file to search against (default {DEFAULT_DATA})")
    p.set_defaults(cmd=None, window=DEFAULT_WINDOW, seed="one", score="entropy", compressor="context",
                   masks=FULL_RANGE, taps=FULL_RANGE, batch=DEFAULT_BATCH, skip_repeated_masks=False,
                   progress=False, out=None, url=QRNG_URL, bits=DEFAULT_MIN_BITS,
                   timeout=DEFAULT_TIMEOUT, width=8)
    sub = p.add_subparsers(dest="cmd")

    s = sub.add_parser("search", help="Exhaustive mask x tap search (default command).")
    s.add_argument("--data", default=argparse.SUPPRESS, help="Sample file (same as the top-level --data)")
    s.add_argument("-w", "--window", type=int, default=DEFAULT_WINDOW,
                   help=f"Sample bytes scored per candidate (default {DEFAULT_WINDOW})")
    s.add_argument("--seed", choices=SEED_POLICIES, default="one",
                   help="Initial register: 'one' (always 1) or 'tap' (the tap selector)")
    s.add_argument("--score", choices=SCORE_POLICIES, default="entropy",
                   help="'entropy' or 'compressed' (entropy, then compressed size)")
    s.add_argument("--compressor", choices=sorted(COMPRESSORS), default="context",
                   help="Compressor for --score compressed (default context)")
    s.add_argument("--masks", type=parse_range, default=FULL_RANGE,
                   help="Mask index range A:B, mask = 0x8000 | i (default 0:65536)")
    s.add_argument("--taps", type=parse_range, default=FULL_RANGE,
                   help="Tap selector range A:B (default 0:65536)")
    s.add_argument("-b", "--batch", type=int, default=DEFAULT_BATCH,
                   help=f"Tap selectors evaluated together (default {DEFAULT_BATCH})")
    s.add_argument("--skip-repeated-masks", action="store_true",
                   help="Skip mask indices >= 0x8000, which repeat earlier masks")
    s.add_argument("--progress", action="store_true", help="Show a progress bar over masks")

    f = sub.add_parser("fetch", help="Build a binary sample from the ANU quantum RNG.")
    f.add_argument("-o", "--out", default=DEFAULT_QUANTUM, help=f"Output file (default {DEFAULT_QUANTUM})")
    f.add_argument("--url", default=QRNG_URL, help="Endpoint returning '0'/'1' text")
    f.add_argument("--bits", type=int, default=DEFAULT_MIN_BITS,
                   help=f"Minimum number of bits to collect (default {DEFAULT_MIN_BITS})")
    f.add_argument("--timeout", type=float, default=DEFAULT_TIMEOUT, help="HTTP timeout in seconds")

    h = sub.add_parser("histogram", help="Plot the states visited by every small LFSR mask.")
    h.add_argument("-o", "--out", default=DEFAULT_PLOT, help=f"PNG output (default {DEFAULT_PLOT})")
    h.add_argument("--width", type=int, default=8, help="Register width in bits (default 8)")
    return p


def run_search(args) -> None:
    sample = load_sample(args.data, args.window)
    print(f"Entropy(data) {baseline(sample, args.window)}")
    best = search(
        sample,
        masks=args.masks,
        taps=args.taps,
        seed_policy=args.seed,
        score_policy=args.score,
        compressor=args.compressor,
        window=args.window,
        batch_size=args.batch,
        prune=skip_repeated_masks if args.skip_repeated_masks else None,
        report=print_candidate,
        progress=args.progress,
    )
    if best is None:
        print("[-] Nothing evaluated")
    else:
        print(f"[*] Best: mask=0x{best.mask:04x} tap=0x{best.tap:04x} entropy={best.entropy:.6f}")


def run_fetch(args) -> None:
    out = args.out or DEFAULT_QUANTUM
    data = fetch_sample(out, args.url, args.bits, args.timeout)
    print(f"[+] {len(data)} bytes written -> {out}")


def run_histogram(args) -> None:
    out = args.out or DEFAULT_PLOT
    periods, values, buckets = cycle_histogram(args.width)
    for mask, n in periods.items():
        print(f"0x{mask:02x} {n}")
    plot_histogram(values, out, bins=1 << args.width)
    for value, count in sorted_buckets(buckets):
        print(f"{value} {count}")
    print(f"[+] Histogram saved -> {out}")


def main(argv=None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)
    cmd = args.cmd or ("fetch" if args.fetch else "search")
    try:
        if cmd == "search":
            run_search(args)
        elif cmd == "fetch":
            run_fetch(args)
        elif cmd == "histogram":
            run_histogram(args)
    except KeyboardInterrupt:
        print("\n[!] Interrupted by user", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
