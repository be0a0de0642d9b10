"""
export formats - CSV, GeoJSON, Graphviz DOT, Markdown journeys, JSON, Voyant corpus.
"""

import csv
import json
import logging
from datetime import datetime
from io import StringIO
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..core.config import ExportConfig
from ..index.experience_index import ExperienceIndex
from ..analysis.locations import LocationAggregator
from ..analysis.network import generate_domain_network
from ..analysis.journey import JourneyTracker
from .privacy import generate_shareable_dataset


logger = logging.getLogger("ubicity.export")


CSV_HEADERS = [
    "id", "timestamp", "learner_id", "location", "type",
    "description", "domains", "success", "latitude", "longitude"
]

FORMATS = ["csv", "geojson", "dot", "markdown", "json", "voyant"]

EXTENSIONS = {
    "csv": "csv",
    "geojson": "geojson",
    "dot": "dot",
    "markdown": "md",
    "json": "json",
    "voyant": "json",
}


def voyant_corpus(index: ExperienceIndex) -> List[Dict[str, Any]]:
    """one text document per experience for Voyant-style corpus tools."""
    texts = []
    for experience_id, exp in index.experiences.items():
        location = exp.location_name or "Unknown"
        content = [exp.experience.description] + list(exp.connections_made) + list(exp.next_questions)
        texts.append({
            "id": experience_id,
            "title": f"{location} - {exp.experience.type}",
            "content": "\n\n".join(content),
            "metadata": {
                "location": exp.location_name,
                "domains": ", ".join(exp.domains),
                "type": exp.experience.type,
                "timestamp": exp.timestamp,
            },
        })
    return texts


def _format_date(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        return timestamp


class ExperienceExporter:
    """
    renders an index into text formats.
    render() returns content; export() also writes it to disk.
    """

    def __init__(self, index: ExperienceIndex, config: Optional[ExportConfig] = None):
        self.index = index
        self.config = config or ExportConfig()

    def to_csv(self) -> str:
        buffer = StringIO()
        writer = csv.writer(buffer, lineterminator="\n")
        writer.writerow(CSV_HEADERS)

        for exp in self.index.experiences.values():
            coords = exp.coordinates
            outcome = exp.experience.outcome
            success = "" if outcome is None or outcome.success is None else str(outcome.success).lower()
            writer.writerow([
                exp.id,
                exp.timestamp,
                exp.learner_id,
                exp.location_name or "",
                exp.experience.type,
                exp.experience.description,
                "; ".join(exp.domains),
                success,
                coords.latitude if coords else "",
                coords.longitude if coords else "",
            ])

        return buffer.getvalue()

    def to_geojson(self) -> Dict[str, Any]:
        """FeatureCollection of located places; places without coordinates are skipped."""
        features = []
        location_map = LocationAggregator(self.index).map_by_location()

        for name, summary in location_map.items():
            if summary.coordinates is None:
                continue
            features.append({
                "type": "Feature",
                "geometry": {
                    "type": "Point",
                    # geojson order is [lon, lat]
                    "coordinates": [summary.coordinates.longitude, summary.coordinates.latitude],
                },
                "properties": {
                    "name": name,
                    "experiences": summary.count,
                    "learners": summary.learners,
                    "diversity": summary.diversity,
                    "domains": list(summary.domains),
                    "types": list(summary.types),
                },
            })

        return {"type": "FeatureCollection", "features": features}

    def to_dot(self) -> str:
        """domain network as an undirected graphviz graph."""
        cfg = self.config
        network = generate_domain_network(self.index)

        lines = [
            "graph DomainNetwork {",
            "  layout=neato;",
            "  overlap=false;",
            "",
        ]

        for node in network.nodes:
            width = max(cfg.dot_min_width, min(cfg.dot_max_width, node.size / cfg.dot_size_divisor))
            lines.append(f'  "{self._escape_dot(node.id)}" [width={width:g}];')

        lines.append("")

        for edge in network.edges:
            penwidth = max(cfg.dot_min_penwidth, min(cfg.dot_max_penwidth, edge.weight))
            lines.append(
                f'  "{self._escape_dot(edge.source)}" -- "{self._escape_dot(edge.target)}" '
                f'[penwidth={penwidth:g}];'
            )

        lines.append("}")
        return "\n".join(lines) + "\n"

    def to_markdown(self) -> str:
        """every learner's journey as a markdown document."""
        lines = ["# UbiCity Learner Journeys", ""]

        for journey in JourneyTracker(self.index).all_journeys():
            lines.append(f"## Learner: {journey.learner_id}")
            lines.append("")
            lines.append(f"**Total Experiences:** {journey.experience_count}")
            lines.append("")

            lines.append("### Timeline")
            lines.append("")
            for i, entry in enumerate(journey.timeline, 1):
                lines.append(f"{i}. **{_format_date(entry.timestamp)}** - {entry.location} ({entry.type})")
                if entry.domains:
                    lines.append(f"   - Domains: {', '.join(entry.domains)}")
                lines.append(f"   - {entry.description}")
                lines.append("")

            if journey.domain_evolution:
                lines.append("### Domain Evolution")
                lines.append("")
                for evo in journey.domain_evolution:
                    lines.append(f"- **{_format_date(evo.timestamp)}**: Discovered {', '.join(evo.new_domains)}")
                lines.append("")

            if journey.questions_emerged:
                lines.append("### Questions Emerged")
                lines.append("")
                for question in journey.questions_emerged:
                    lines.append(f"- {question}")
                lines.append("")

            lines.append("---")
            lines.append("")

        return "\n".join(lines)

    def to_json(self) -> List[Dict[str, Any]]:
        return [exp.to_dict() for exp in self.index.experiences.values()]

    def render(self, fmt: str) -> str:
        """content for a format name; unknown names raise ValueError."""
        fmt = fmt.lower()
        if fmt == "md":
            fmt = "markdown"

        if fmt == "csv":
            return self.to_csv()
        if fmt == "geojson":
            return json.dumps(self.to_geojson(), indent=2)
        if fmt == "dot":
            return self.to_dot()
        if fmt == "markdown":
            return self.to_markdown()
        if fmt == "json":
            return json.dumps(self.to_json(), indent=2)
        if fmt == "voyant":
            return json.dumps(voyant_corpus(self.index), indent=2)

        raise ValueError(f"unknown format: {fmt} (expected one of {', '.join(FORMATS)})")

    def export(self, fmt: str, path: Optional[str] = None) -> str:
        """
        write one format to disk; returns the path written.
        default path is <output_dir>/ubicity-export.<ext>.
        """
        content = self.render(fmt)

        if path is None:
            fmt_key = "markdown" if fmt.lower() == "md" else fmt.lower()
            output_dir = Path(self.config.output_dir or ".")
            target = output_dir / f"ubicity-export.{EXTENSIONS[fmt_key]}"
        else:
            target = Path(path)

        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, "w", encoding="utf-8") as f:
            f.write(content)

        logger.info(f"exported {fmt} to {target}")
        return str(target)

    # private helpers

    def _escape_dot(self, text: str) -> str:
        return text.replace("\\", "\\\\").replace('"', '\\"')


def export_data(
    index: ExperienceIndex,
    fmt: str,
    output_path: Optional[str] = None,
    config: Optional[ExportConfig] = None,
    anonymize: bool = False
) -> str:
    """
    render one format, optionally over the shareable (anonymized) dataset.
    writes to output_path when given and returns the path, else returns content.
    """
    if anonymize:
        shared = ExperienceIndex()
        shared.bulk_load(generate_shareable_dataset(index.experiences.values(), config))
        index = shared

    exporter = ExperienceExporter(index, config)
    if output_path:
        return exporter.export(fmt, output_path)
    return exporter.render(fmt)
