# Reference data validation
"""
Data Validator Module for the career track catalog and skill reference table.
Checks the raw JSONL records before they are turned into models and graph nodes.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Set

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Container for validation results"""
    is_valid: bool
    errors: List[str]
    warnings: List[str]
    stats: Dict[str, Any]


class CatalogValidator:
    """
    Validates skill and track records according to the reference data schema
    """

    def __init__(self):
        self.skill_required_fields = ['skill_id', 'name', 'category', 'base_hours']
        self.track_required_fields = ['id', 'title', 'required_skills']

        self.skill_field_types = {
            'skill_id': str,
            'name': str,
            'category': str,
            'base_hours': (int, float),
            'project_worthy': bool,
            'aliases': list,
            'resources': list,
        }

        self.weight_range = (1, 10)
        self.base_hours_range = (0, 1000)
        self.demand_levels = {'High', 'Medium', 'Low'}

    def validate_skills(self, records: List[Dict]) -> ValidationResult:
        """
        Validate the skill reference table.

        Args:
            records: Raw skill records

        Returns:
            ValidationResult object with validation details
        """
        logger.info(f"Starting validation of {len(records)} skill records")
        errors = []
        warnings = []
        stats = {
            'total_records': len(records),
            'valid_records': 0,
            'duplicate_skills': 0,
            'missing_fields': defaultdict(int),
            'categories': defaultdict(int),
        }

        if not records:
            errors.append("Skill table is empty")
            return ValidationResult(False, errors, warnings, stats)

        skill_ids = []
        for idx, record in enumerate(records):
            record_errors = []
            for field in self.skill_required_fields:
                if field not in record or record[field] is None:
                    stats['missing_fields'][field] += 1
                    # A missing hour estimate only matters once the skill shows up in a gap
                    if field == 'base_hours':
                        warnings.append(f"Record {idx}: skill '{record.get('skill_id')}' has no base_hours")
                    else:
                        record_errors.append(f"Record {idx}: Missing required field '{field}'")

            for field, expected_type in self.skill_field_types.items():
                value = record.get(field)
                if value is None:
                    continue
                if isinstance(value, bool) and expected_type != bool:
                    record_errors.append(f"Record {idx}: Field '{field}' has invalid type bool")
                elif not isinstance(value, expected_type):
                    record_errors.append(f"Record {idx}: Field '{field}' has invalid type {type(value).__name__}")

            hours = record.get('base_hours')
            if isinstance(hours, (int, float)) and not isinstance(hours, bool):
                min_val, max_val = self.base_hours_range
                if not (min_val < hours <= max_val):
                    record_errors.append(f"Record {idx}: base_hours {hours} out of range ({min_val}, {max_val}]")

            if isinstance(record.get('skill_id'), str) and not record['skill_id'].strip():
                record_errors.append(f"Record {idx}: skill_id cannot be empty")

            if record_errors:
                errors.extend(record_errors)
            else:
                stats['valid_records'] += 1
                stats['categories'][record.get('category')] += 1
                skill_ids.append(record['skill_id'])

        duplicates = self._find_duplicates(skill_ids)
        stats['duplicate_skills'] = len(duplicates)
        if duplicates:
            errors.append(f"Found {len(duplicates)} duplicate skill ids: {duplicates[:5]}")

        is_valid = len(errors) == 0
        logger.info(f"Skill validation complete. Valid: {is_valid}, Errors: {len(errors)}, Warnings: {len(warnings)}")
        return ValidationResult(is_valid, errors, warnings, stats)

    def validate_tracks(self, records: List[Dict], known_skills: Iterable[str]) -> ValidationResult:
        """
        Validate career track records against the known skill ids.

        Args:
            records: Raw track records
            known_skills: Skill ids present in the skill table

        Returns:
            ValidationResult object with validation details
        """
        logger.info(f"Starting validation of {len(records)} track records")
        known: Set[str] = set(known_skills)
        errors = []
        warnings = []
        stats = {
            'total_records': len(records),
            'valid_records': 0,
            'duplicate_tracks': 0,
            'invalid_weights': 0,
            'unknown_skills': defaultdict(int),
        }

        track_ids = []
        for idx, record in enumerate(records):
            record_errors = []
            for field in self.track_required_fields:
                if field not in record or record[field] is None:
                    record_errors.append(f"Record {idx}: Missing required field '{field}'")
            if record_errors:
                errors.extend(record_errors)
                continue

            track_id = record['id']
            requirements = record['required_skills']
            if not isinstance(requirements, list) or not requirements:
                errors.append(f"Track '{track_id}': required_skills must be a non-empty list")
                continue

            seen_skills = set()
            for requirement in requirements:
                skill_id = requirement.get('skill_id') if isinstance(requirement, dict) else None
                weight = requirement.get('weight') if isinstance(requirement, dict) else None
                if not skill_id:
                    record_errors.append(f"Track '{track_id}': requirement without skill_id")
                    continue
                if skill_id in seen_skills:
                    record_errors.append(f"Track '{track_id}': skill '{skill_id}' listed twice")
                seen_skills.add(skill_id)
                if skill_id not in known:
                    stats['unknown_skills'][skill_id] += 1
                    record_errors.append(f"Track '{track_id}': skill '{skill_id}' is not in the skill table")
                min_w, max_w = self.weight_range
                if not isinstance(weight, int) or isinstance(weight, bool) or not (min_w <= weight <= max_w):
                    stats['invalid_weights'] += 1
                    record_errors.append(f"Track '{track_id}': weight {weight!r} for '{skill_id}' out of range [{min_w}, {max_w}]")

            demand = record.get('demand_level')
            if demand is not None and demand not in self.demand_levels:
                warnings.append(f"Track '{track_id}': unknown demand_level '{demand}'")
            if not record.get('job_titles'):
                warnings.append(f"Track '{track_id}': no job titles, goal matching will rely on the description only")

            if record_errors:
                errors.extend(record_errors)
            else:
                stats['valid_records'] += 1
                track_ids.append(track_id)

        duplicates = self._find_duplicates(track_ids)
        stats['duplicate_tracks'] = len(duplicates)
        if duplicates:
            errors.append(f"Found {len(duplicates)} duplicate track ids: {duplicates[:5]}")

        is_valid = len(errors) == 0
        logger.info(f"Track validation complete. Valid: {is_valid}, Errors: {len(errors)}, Warnings: {len(warnings)}")
        return ValidationResult(is_valid, errors, warnings, stats)

    def _find_duplicates(self, identifiers: List[str]) -> List[str]:
        """Find duplicate identifiers"""
        counts = defaultdict(int)
        for identifier in identifiers:
            counts[identifier] += 1
        return [identifier for identifier, count in counts.items() if count > 1]

    def generate_validation_report(self, result: ValidationResult, title: str = "Catalog") -> str:
        """
        Summarise a validation run for the logs: counts first, then every issue.

        Args:
            result: Outcome of validate_skills or validate_tracks
            title: Dataset name used in the header

        Returns:
            Multi-line report text
        """
        stats = result.stats
        rule = "-" * 60
        lines = [
            rule,
            f"{title}: {'OK' if result.is_valid else 'INVALID'} "
            f"({stats['valid_records']}/{stats['total_records']} records usable)",
            rule,
        ]
        for key in ('duplicate_skills', 'duplicate_tracks', 'invalid_weights'):
            if stats.get(key):
                lines.append(f"{key.replace('_', ' ')}: {stats[key]}")
        if stats.get('unknown_skills'):
            lines.append(f"unknown skills: {', '.join(sorted(stats['unknown_skills']))}")
        for label, issues in (("error", result.errors), ("warning", result.warnings)):
            if issues:
                lines.append(f"{len(issues)} {label}(s):")
                lines.extend(f"  * {issue}" for issue in issues)
        lines.append(rule)
        return "\n".join(lines)
