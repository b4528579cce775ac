"""
YouTube Digest - Main CLI
=========================

Build a digest of new videos across curated channel groups.

Usage:
    python orchestrator.py --frequency weekly --output ./digests

Flow:
    1. Load configuration (.env + environment + flags)
    2. Load channel groups
    3. For each group: discover recent videos, fetch transcripts, summarize
    4. Assemble the report (ordered, capped, counted)
    5. Print the plain-text digest and write HTML / Markdown / digest.json
"""

import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from ytdigest import (
    ConfigError,
    DigestConfig,
    DigestPipeline,
    build_email,
    build_index,
    generate_markdown,
    load_channel_groups,
)

DEFAULT_OUTPUT = Path("./digests")


def main(argv=None) -> int:
    import argparse

    load_dotenv()

    parser = argparse.ArgumentParser(
        description="YouTube channel-group digest",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Daily digest with the built-in channel groups
  python orchestrator.py

  # Weekly digest from a custom channel list
  python orchestrator.py --frequency weekly --channels channels.yaml

  # Strictly sequential run (one channel, one transcript at a time)
  python orchestrator.py --sequential --verbose
        """
    )

    parser.add_argument(
        "--frequency",
        choices=["daily", "weekly"],
        default=None,
        help="Digest period (default: DIGEST_FREQUENCY or daily)"
    )
    parser.add_argument(
        "--channels",
        default=None,
        help="YAML file with channel groups (default: CHANNELS_FILE or built-in groups)"
    )
    parser.add_argument(
        "--output",
        default=str(DEFAULT_OUTPUT),
        help="Output directory (default: ./digests)"
    )
    parser.add_argument(
        "--no-summarize",
        action="store_true",
        help="Skip the LLM; show a transcript excerpt instead"
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Process channels and videos one at a time"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Verbose output"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # 1) Configuration
    overrides = {"frequency": args.frequency, "channels_file": args.channels}
    if args.no_summarize:
        overrides["summarize"] = False
    if args.sequential:
        overrides["channel_workers"] = 1
        overrides["transcript_workers"] = 1

    try:
        config = DigestConfig.from_env(**overrides)
        config.require_credentials()
        groups = load_channel_groups(config.channels_file)
        pipeline = DigestPipeline(config, show_progress=True)
    except ConfigError as e:
        print(f"❌ Fatal: {e}")
        return 1

    print(f"\n🎥 Building {config.frequency.value} digest for {len(groups)} group(s) "
          f"(last {config.max_age_days:g} days, up to {config.display_cap} per section)...")

    # 2) Run
    try:
        report = pipeline.run(groups)
    except ConfigError as e:
        print(f"❌ Fatal: {e}")
        return 1

    # 3) Render + write
    email = build_email(report)
    print(f"\n{email.subject}\n")
    print(email.text)

    out_dir = Path(args.output)
    out_dir.mkdir(parents=True, exist_ok=True)
    html_path = out_dir / "digest.html"
    html_path.write_text(email.html, encoding="utf-8")
    md_path = generate_markdown(out_dir, report)
    idx_path = build_index(out_dir, report)

    print(f"\n✅ Done!")
    print(f"   HTML:     {html_path}")
    print(f"   Markdown: {md_path}")
    print(f"   Index:    {idx_path}\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
