import re
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .config import WCAG_TAXONOMY_GUID, WCAG_TAXONOMY_NAME
from .errors import MalformedFinding


WCAG_TAG = re.compile(r"^wcag(\d)(\d)(\d+)$")


@dataclass(frozen=True)
class RuleEntry:
    rule_id: str
    index: int
    description: str = ""
    help: str = ""
    help_uri: str = ""
    tags: Tuple[str, ...] = ()


@dataclass
class RuleCatalog:
    entries: List[RuleEntry] = field(default_factory=list)
    _index: Dict[str, int] = field(default_factory=dict, repr=False)

    def index_of(self, rule_id):
        return self._index[rule_id]

    def __contains__(self, rule_id):
        return rule_id in self._index

    def __len__(self):
        return len(self.entries)

    def add(self, finding):
        if not finding.rule_id:
            raise MalformedFinding(f"Finding without a rule id (outcome {finding.outcome!r})")
        # first occurrence wins; later metadata for the same rule is ignored
        if finding.rule_id in self._index:
            return self._index[finding.rule_id]
        entry = RuleEntry(
            rule_id=finding.rule_id,
            index=len(self.entries),
            description=finding.rule_description,
            help=finding.rule_help,
            help_uri=finding.help_uri,
            tags=finding.tags,
        )
        self.entries.append(entry)
        self._index[entry.rule_id] = entry.index
        return entry.index


def build_rule_catalog(findings):
    catalog = RuleCatalog()
    for finding in findings:
        catalog.add(finding)
    return catalog


def wcag_criterion(tag):
    m = WCAG_TAG.match(tag)
    if not m:
        return None
    return ".".join(m.groups())


def wcag_taxa(catalog):
    """Success criteria referenced by the catalog's tags, first-seen order."""
    seen = []
    for entry in catalog.entries:
        for tag in entry.tags:
            criterion = wcag_criterion(tag)
            if criterion and criterion not in seen:
                seen.append(criterion)
    return seen


def _relationships(entry, taxa_index):
    relationships = []
    linked = set()
    for tag in entry.tags:
        criterion = wcag_criterion(tag)
        if criterion is None or criterion in linked:
            continue
        linked.add(criterion)
        relationships.append(
            {
                "target": {
                    "id": f"WCAG-{criterion}",
                    "index": taxa_index[criterion],
                    "toolComponent": {"name": WCAG_TAXONOMY_NAME, "index": 0, "guid": WCAG_TAXONOMY_GUID},
                },
                "kinds": ["superset"],
            }
        )
    return relationships


def rule_descriptors(catalog, taxa):
    taxa_index = {criterion: i for i, criterion in enumerate(taxa)}
    descriptors = []
    for entry in catalog.entries:
        descriptor = {
            "id": entry.rule_id,
            "name": entry.help or entry.rule_id,
            "fullDescription": {"text": entry.description or entry.help or entry.rule_id},
        }
        if entry.help_uri:
            descriptor["helpUri"] = entry.help_uri
        if entry.tags:
            descriptor["properties"] = {"tags": list(entry.tags)}
        relationships = _relationships(entry, taxa_index)
        if relationships:
            descriptor["relationships"] = relationships
        descriptors.append(descriptor)
    return descriptors
