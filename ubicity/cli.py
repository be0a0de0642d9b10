"""
ubicity CLI - capture learning experiences and mine them for patterns.
"""

import argparse
import json
import logging
import sys
from datetime import datetime
from typing import List, Optional

from .core.config import UbicityConfig
from .core.errors import UbicityError, ValidationError
from .core.logs import setup_logging
from .core.schemas import safe_validate_experience
from .core.storage import ExperienceStorage
from .export.formats import FORMATS, export_data
from .mapper import UrbanKnowledgeMapper

logger = logging.getLogger("ubicity.cli")


RULE = "=" * 60


def _date(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return timestamp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ubicity",
        description="Urban learning capture and pattern mapping.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  ubicity capture --learner alex-maker --location Makerspace \\
      --type experiment --description "soldered a synth" --domain electronics --domain music
  ubicity report                 # full analysis
  ubicity hotspots 5             # hotspots with 5+ domains
  ubicity learner alex-maker     # one learner's journey
  ubicity network                # domain connections
  ubicity export geojson -o map.geojson
        """
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        help="storage directory (default: $UBICITY_DATA_DIR or ./ubicity-data)"
    )
    parser.add_argument("--quiet", "-q", action="store_true", help="minimal output")
    parser.add_argument("--verbose", "-v", action="store_true", help="verbose/debug output")

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    capture = sub.add_parser("capture", help="capture a learning experience")
    capture.add_argument("--file", "-f", type=str, help="JSON file with one experience (or a list)")
    capture.add_argument("--learner", type=str, help="learner id (pseudonym)")
    capture.add_argument("--location", type=str, help="location name")
    capture.add_argument("--type", type=str, dest="experience_type", help="experience type")
    capture.add_argument("--description", type=str, help="what happened")
    capture.add_argument("--domain", type=str, action="append", default=[], help="domain (repeatable)")
    capture.add_argument("--question", type=str, action="append", default=[], help="next question (repeatable)")

    report = sub.add_parser("report", help="generate full analysis report")
    report.add_argument("--no-save", action="store_true", help="don't persist the report snapshot")
    report.add_argument("--json", action="store_true", help="print the report as JSON")

    hotspots = sub.add_parser("hotspots", help="find learning hotspots")
    hotspots.add_argument("min_diversity", type=int, nargs="?", default=None,
                          help="minimum distinct domains (default: 3)")

    sub.add_parser("network", help="show domain connection network")

    learner = sub.add_parser("learner", help="show journey for a specific learner")
    learner.add_argument("learner_id", type=str)

    sub.add_parser("stats", help="show storage statistics")

    export = sub.add_parser("export", help="export data")
    export.add_argument("format", nargs="?", default=None,
                        help=f"one of: {', '.join(FORMATS)} (default: json)")
    export.add_argument("--output", "-o", type=str, help="output file (default: stdout)")
    export.add_argument("--anonymize", action="store_true", help="export the shareable, anonymized dataset")

    validate = sub.add_parser("validate", help="validate a JSON experience file")
    validate.add_argument("file", type=str)

    return parser


# command handlers

def handle_capture(mapper: UrbanKnowledgeMapper, args) -> int:
    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            payload = json.load(f)
        records = payload if isinstance(payload, list) else [payload]
    else:
        missing = [
            flag for flag, value in (
                ("--learner", args.learner),
                ("--location", args.location),
                ("--type", args.experience_type),
                ("--description", args.description),
            ) if not value
        ]
        if missing:
            print(f"missing required options: {', '.join(missing)}", file=sys.stderr)
            return 1

        record = {
            "learner": {"id": args.learner},
            "context": {"location": {"name": args.location}},
            "experience": {
                "type": args.experience_type,
                "description": args.description,
                "domains": args.domain,
            },
        }
        if args.question:
            record["experience"]["outcome"] = {"next_questions": args.question}
        records = [record]

    for record in records:
        experience_id = mapper.capture_experience(record)
        print(f"Experience captured: {experience_id}")

    print(f"Total experiences: {len(mapper.experiences)}")
    return 0


def handle_report(mapper: UrbanKnowledgeMapper, args) -> int:
    report = mapper.generate_report(persist=not args.no_save)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
        return 0

    summary = report.summary
    print(RULE)
    print("UbiCity Learning Analysis Report")
    print(RULE)
    print(f"\nGenerated: {report.generated}")
    print("\nSummary:")
    print(f"  Total Experiences: {summary.total_experiences}")
    print(f"  Unique Learners: {summary.unique_learners}")
    print(f"  Unique Locations: {summary.unique_locations}")
    print(f"  Unique Domains: {summary.unique_domains}")
    print(f"  Interdisciplinary: {summary.interdisciplinary_experiences}")

    if report.learning_hotspots:
        print("\nTop Learning Hotspots:")
        for h in report.learning_hotspots[:mapper.config.analysis.top_hotspots_shown]:
            print(f"\n  {h.name}:")
            print(f"    Experiences: {h.count}")
            print(f"    Domains: {', '.join(h.domains)}")
            print(f"    Diversity Score: {h.diversity}")

    print("\n" + RULE)
    if not args.no_save:
        print(f"Full report saved to: {mapper.storage.analyses_dir}")
    return 0


def handle_hotspots(mapper: UrbanKnowledgeMapper, args) -> int:
    min_diversity = args.min_diversity
    if min_diversity is None:
        min_diversity = mapper.config.analysis.hotspot_min_diversity

    print(f"\nLearning Hotspots (min diversity: {min_diversity}):")
    print(RULE)

    hotspots = mapper.find_hotspots(min_diversity)
    if not hotspots:
        print("\nNo hotspots found with the specified criteria.")
        print("Try lowering the minimum diversity threshold.")
        return 0

    for h in hotspots:
        print(f"\n{h.name}:")
        print(f"  Experiences: {h.count}")
        print(f"  Unique Learners: {h.learners}")
        print(f"  Domains: {', '.join(h.domains)}")
        print(f"  Diversity Score: {h.diversity}")
        if h.coordinates:
            print(f"  Coordinates: {h.coordinates.latitude}, {h.coordinates.longitude}")
    return 0


def handle_network(mapper: UrbanKnowledgeMapper, args) -> int:
    network = mapper.generate_domain_network()

    print("\nDomain Network:")
    print(RULE)
    print(f"\nNodes ({len(network.nodes)} domains):")
    for node in sorted(network.nodes, key=lambda n: n.size, reverse=True):
        print(f"  {node.id}: {node.size} experiences")

    print(f"\nEdges ({len(network.edges)} connections):")
    top_edges = sorted(network.edges, key=lambda e: e.weight, reverse=True)
    for edge in top_edges[:mapper.config.analysis.top_edges_shown]:
        print(f"  {edge.source} <--> {edge.target} ({edge.weight})")
    return 0


def handle_learner(mapper: UrbanKnowledgeMapper, args) -> int:
    journey = mapper.get_journey(args.learner_id)
    if journey is None:
        print(f"No experiences found for learner: {args.learner_id}", file=sys.stderr)
        return 1

    print(f"\nLearner Journey: {journey.learner_id}")
    print(RULE)
    print(f"\nTotal Experiences: {journey.experience_count}")

    print("\nTimeline:")
    for i, entry in enumerate(journey.timeline, 1):
        print(f"\n{i}. {entry.location} - {entry.type}")
        print(f"   Date: {_date(entry.timestamp)}")
        if entry.domains:
            print(f"   Domains: {', '.join(entry.domains)}")
        description = entry.description
        if len(description) > 100:
            description = description[:100] + "..."
        print(f"   {description}")

    if journey.domain_evolution:
        print("\nDomain Evolution:")
        for evo in journey.domain_evolution:
            print(f"  {_date(evo.timestamp)}: {', '.join(evo.new_domains)}")

    if journey.questions_emerged:
        print("\nQuestions Emerged:")
        for q in journey.questions_emerged:
            print(f"  - {q}")
    return 0


def handle_stats(mapper: UrbanKnowledgeMapper, args) -> int:
    stats = mapper.storage.get_stats()

    print("\nStorage Statistics:")
    print(RULE)
    print(f"  Directory: {stats['storage_dir']}")
    print(f"  Total Experiences: {stats['total_experiences']}")
    print(f"  Total Size: {stats['total_size_kb']} KB")
    print(f"  Loaded in Memory: {len(mapper.experiences)}")
    return 0


def handle_export(mapper: UrbanKnowledgeMapper, args) -> int:
    fmt = args.format or mapper.config.export.default_format
    result = export_data(
        mapper.index,
        fmt,
        output_path=args.output,
        config=mapper.config.export,
        anonymize=args.anonymize
    )
    if args.output:
        print(f"Exported {fmt} to {result}")
    else:
        print(result)
    return 0


def handle_validate(args) -> int:
    with open(args.file, "r", encoding="utf-8") as f:
        payload = json.load(f)
    records = payload if isinstance(payload, list) else [payload]

    failures = 0
    for i, record in enumerate(records, 1):
        result = safe_validate_experience(record)
        label = record.get("id", f"#{i}") if isinstance(record, dict) else f"#{i}"
        if result.success:
            print(f"[ok] {label}")
        else:
            failures += 1
            print(f"[invalid] {label}")
            for err in result.errors:
                print(f"   - {err}")

    print(f"\n{len(records) - failures}/{len(records)} valid")
    return 1 if failures else 0


HANDLERS = {
    "capture": handle_capture,
    "report": handle_report,
    "hotspots": handle_hotspots,
    "network": handle_network,
    "learner": handle_learner,
    "stats": handle_stats,
    "export": handle_export,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # setup logging
    log_level = logging.WARNING if args.quiet else (logging.DEBUG if args.verbose else logging.INFO)
    setup_logging(level=log_level)

    if not args.command:
        parser.print_help()
        return 0

    try:
        # validate needs no store
        if args.command == "validate":
            return handle_validate(args)

        config = UbicityConfig.from_env()
        storage = ExperienceStorage(args.data_dir, config.storage)
        mapper = UrbanKnowledgeMapper(storage=storage, config=config)
        mapper.initialize()
        mapper.load_all(strict=False)

        return HANDLERS[args.command](mapper, args)

    except ValidationError as e:
        print("Validation failed:", file=sys.stderr)
        for err in e.errors:
            print(f"  - {err}", file=sys.stderr)
        return 1
    except (UbicityError, OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
