"""Mapping rules: admin-defined overrides of the built-in classifier.

``MappingRuleEngine`` is pure: it evaluates a description against a rule
snapshot handed to it and never touches the database. ``MappingRuleService``
manages the stored rule table and produces those snapshots.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from donortrack.database.base import Database
from donortrack.domain.classifier import (
    Campaign,
    Classification,
    General,
    Sponsorship,
    canonicalize_name,
)
from donortrack.domain.entities import MappingRule, MatchType, ProjectType
from donortrack.domain.errors import NotFoundError, ValidationError, mapping_rule_not_found

_CAPTURE_REFERENCE = re.compile(r"\$(\d+)")


def substitute_captures(template: str, match: Optional[re.Match]) -> str:
    """Replace ``$1``-style references in a template with regex capture groups.

    References to groups that do not exist or did not participate become empty.
    Without a regex match the template is returned unchanged.
    """
    if match is None:
        return template

    def replace(reference: re.Match) -> str:
        index = int(reference.group(1))
        if index > (match.re.groups or 0):
            return ""
        return match.group(index) or ""

    return _CAPTURE_REFERENCE.sub(replace, template).strip()


@dataclass(frozen=True)
class RuleMatch:
    """A rule that matched a description, with templates already substituted."""

    rule: MappingRule
    project_title: Optional[str]
    child_name: Optional[str]

    def to_classification(self) -> Classification:
        """Convert the match into the classification it routes to."""
        if self.rule.target_project_type == ProjectType.SPONSORSHIP:
            return Sponsorship(child_names=(self.child_name,))
        if self.rule.target_project_type == ProjectType.CAMPAIGN:
            return Campaign(code=None, project_title=self.project_title)
        return General(project_title=self.project_title)


class MappingRuleEngine:
    """Evaluates descriptions against an ordered snapshot of mapping rules."""

    def __init__(self, rules: Iterable[MappingRule] = ()):
        """Initialize the engine.

        Args:
            rules: Rule snapshot. Inactive rules are dropped; the rest are
                ordered by descending priority, ties keeping their given order.
        """
        active = [rule for rule in rules if rule.active]
        # sorted() is stable, so equal priorities keep insertion order
        self.rules = sorted(active, key=lambda rule: -rule.priority)
        self._compiled: dict[str, re.Pattern] = {}

    def __len__(self) -> int:
        return len(self.rules)

    def _compile(self, rule: MappingRule) -> re.Pattern:
        pattern = self._compiled.get(rule.pattern)
        if pattern is None:
            pattern = re.compile(rule.pattern, re.IGNORECASE)
            self._compiled[rule.pattern] = pattern
        return pattern

    def _match(self, rule: MappingRule, description: str) -> tuple[bool, Optional[re.Match]]:
        if rule.match_type == MatchType.EXACT:
            return description.strip() == rule.pattern.strip(), None
        if rule.match_type == MatchType.CONTAINS:
            return rule.pattern.lower() in description.lower(), None
        regex_match = self._compile(rule).search(description)
        return regex_match is not None, regex_match

    def find_rule(self, description: Optional[str]) -> Optional[RuleMatch]:
        """Return the first rule matching the description, or None.

        Args:
            description: Payment description

        Returns:
            RuleMatch with substituted project title and child name, or None
        """
        if not description or not self.rules:
            return None

        for rule in self.rules:
            matched, regex_match = self._match(rule, description)
            if not matched:
                continue

            project_title = None
            if rule.target_project_title:
                project_title = substitute_captures(rule.target_project_title, regex_match)

            child_name = None
            if rule.child_name_template:
                child_name = canonicalize_name(
                    substitute_captures(rule.child_name_template, regex_match)
                )

            # A sponsorship rule whose template came out empty cannot route anything
            if rule.target_project_type == ProjectType.SPONSORSHIP and not child_name:
                continue
            if rule.target_project_type != ProjectType.SPONSORSHIP and not project_title:
                continue

            return RuleMatch(rule=rule, project_title=project_title, child_name=child_name)

        return None


class MappingRuleService:
    """Service for managing stored mapping rules."""

    def __init__(self, db: Database):
        """Initialize mapping rule service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_rule(
        self,
        pattern: str,
        target_project_title: Optional[str],
        target_project_type: ProjectType = ProjectType.GENERAL,
        match_type: MatchType = MatchType.CONTAINS,
        child_name_template: Optional[str] = None,
        priority: int = 0,
    ) -> int:
        """Create a mapping rule.

        Args:
            pattern: Pattern compared against descriptions
            target_project_title: Project title template (general/campaign rules)
            target_project_type: Project type the rule routes to
            match_type: exact, contains or regex
            child_name_template: Child name template, required for sponsorship rules
            priority: Higher priorities are checked first

        Returns:
            Rule ID

        Raises:
            ValidationError: If the rule is incomplete or the regex is invalid
        """
        if pattern is None or not pattern.strip():
            raise ValidationError("Rule pattern cannot be blank")

        try:
            match_type = MatchType(match_type)
            target_project_type = ProjectType(target_project_type)
        except ValueError as e:
            raise ValidationError(str(e))

        if match_type == MatchType.REGEX:
            try:
                re.compile(pattern, re.IGNORECASE)
            except re.error as e:
                raise ValidationError(f"Invalid regex pattern '{pattern}': {e}")

        if target_project_type == ProjectType.SPONSORSHIP:
            if not child_name_template or not child_name_template.strip():
                raise ValidationError("Sponsorship rules require a child name template")
        elif not target_project_title or not target_project_title.strip():
            raise ValidationError("Rule target project title cannot be blank")

        return self.db.create_mapping_rule(
            pattern=pattern,
            match_type=match_type,
            target_project_title=target_project_title.strip() if target_project_title else None,
            target_project_type=target_project_type,
            child_name_template=child_name_template.strip() if child_name_template else None,
            priority=priority,
        )

    def get_rule(self, rule_id: int) -> Optional[MappingRule]:
        """Get mapping rule by ID."""
        return self.db.get_mapping_rule(rule_id)

    def list_rules(self, active_only: bool = False) -> list[MappingRule]:
        """List rules in evaluation order."""
        return self.db.list_mapping_rules(active_only=active_only)

    def deactivate_rule(self, rule_id: int) -> None:
        """Disable a rule without deleting it.

        Raises:
            NotFoundError: If the rule does not exist
        """
        if self.db.get_mapping_rule(rule_id) is None:
            raise NotFoundError(mapping_rule_not_found(rule_id))
        self.db.set_mapping_rule_active(rule_id, False)

    def load_engine(self) -> MappingRuleEngine:
        """Take a snapshot of the active rules for one import run."""
        return MappingRuleEngine(self.db.list_mapping_rules(active_only=True))
