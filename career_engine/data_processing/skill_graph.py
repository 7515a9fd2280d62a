# Skill graph: career tracks and the weighted skills they require
import logging
import math
from typing import Dict, Iterable, List, Optional

import networkx as nx
import pandas as pd
from thefuzz import fuzz, process

from career_engine.models.career import CareerTrack, LearningResource, RequiredSkill, SkillInfo
from career_engine.models.errors import UnknownSkill

logger = logging.getLogger(__name__)

SUGGESTION_THRESHOLD = 70


def _track_node(track_id: str) -> str:
    return f"track:{track_id}"


def _skill_node(skill_id: str) -> str:
    return f"skill:{skill_id}"


class SkillGraph:
    def __init__(self, df: pd.DataFrame):
        """
        Initializes the SkillGraph with the skill reference DataFrame.
        Tracks are attached afterwards with add_track().
        """
        self.df = df.copy()
        self.graph = nx.DiGraph()
        self._lookup: Dict[str, str] = {}
        self.build_skill_nodes()

    @classmethod
    def from_frames(cls, skills_df: pd.DataFrame, tracks: Iterable[CareerTrack]) -> "SkillGraph":
        skill_graph = cls(skills_df)
        for track in tracks:
            skill_graph.add_track(track)
        logger.info(
            f"Skill graph built: {len(skill_graph.skill_ids())} skills, "
            f"{len(skill_graph.track_ids())} tracks, {skill_graph.graph.number_of_edges()} requirements."
        )
        return skill_graph

    def build_skill_nodes(self):
        """
        Adds one node per skill row, and registers id, name and aliases for resolution.
        """
        for _, row in self.df.iterrows():
            skill_id = row['skill_id']
            hours = row['base_hours']
            if hours is not None:
                hours = None if math.isnan(float(hours)) else float(hours)
            self.graph.add_node(
                _skill_node(skill_id),
                type='skill',
                skill_id=skill_id,
                name=row['name'],
                category=row['category'],
                base_hours=hours,
                project_worthy=bool(row['project_worthy']),
                aliases=list(row['aliases']),
                resources=list(row['resources']),
            )
            self._lookup[skill_id.lower()] = skill_id
            self._lookup.setdefault(str(row['name']).lower().strip(), skill_id)
            for alias in row['aliases']:
                self._lookup.setdefault(alias.lower().strip(), skill_id)

    def add_track(self, track: CareerTrack):
        """
        Adds a track node with one weighted edge per required skill.
        Skills missing from the reference table are kept as external nodes.
        """
        node = _track_node(track.id)
        self.graph.add_node(node, type='track', track_id=track.id, title=track.title)
        for order, requirement in enumerate(track.required_skills):
            skill = _skill_node(requirement.skill_id)
            if skill not in self.graph:
                logger.warning(f"Track '{track.id}' requires '{requirement.skill_id}', which has no reference data.")
                self.graph.add_node(skill, type='external_skill', skill_id=requirement.skill_id,
                                    name=requirement.skill_id, category='General', base_hours=None,
                                    project_worthy=False, aliases=[], resources=[])
            self.graph.add_edge(node, skill, type='requires', weight=requirement.weight, order=order)

    def skill_ids(self) -> List[str]:
        return [data['skill_id'] for _, data in self.graph.nodes(data=True) if data['type'] == 'skill']

    def track_ids(self) -> List[str]:
        return [data['track_id'] for _, data in self.graph.nodes(data=True) if data['type'] == 'track']

    def has_track(self, track_id: str) -> bool:
        return _track_node(track_id) in self.graph

    def has_skill(self, skill_id: str) -> bool:
        return _skill_node(skill_id) in self.graph

    def requirements(self, track_id: str) -> List[RequiredSkill]:
        """Required skills of a track, in catalog order."""
        node = _track_node(track_id)
        if node not in self.graph:
            return []
        edges = sorted(self.graph.out_edges(node, data=True), key=lambda edge: edge[2]['order'])
        return [RequiredSkill(skill_id=self.graph.nodes[target]['skill_id'], weight=data['weight'])
                for _, target, data in edges]

    def tracks_requiring(self, skill_id: str) -> Dict[str, int]:
        node = _skill_node(skill_id)
        if node not in self.graph:
            return {}
        return {self.graph.nodes[source]['track_id']: data['weight']
                for source, _, data in self.graph.in_edges(node, data=True)}

    def hour_estimates(self) -> Dict[str, Optional[float]]:
        """Base learning hours per skill; None where the reference table has no estimate."""
        return {data['skill_id']: data['base_hours']
                for _, data in self.graph.nodes(data=True) if data['type'] in ('skill', 'external_skill')}

    def skill_info(self, skill_id: str) -> Optional[SkillInfo]:
        node = _skill_node(skill_id)
        if node not in self.graph:
            return None
        data = self.graph.nodes[node]
        return SkillInfo(
            skill_id=data['skill_id'],
            name=data['name'],
            category=data['category'],
            base_hours=data['base_hours'],
            project_worthy=data['project_worthy'],
            aliases=data['aliases'],
            resources=[LearningResource(**resource) for resource in data['resources']],
        )

    def category(self, skill_id: str) -> str:
        node = _skill_node(skill_id)
        return self.graph.nodes[node]['category'] if node in self.graph else 'General'

    def is_project_worthy(self, skill_id: str) -> bool:
        node = _skill_node(skill_id)
        return bool(self.graph.nodes[node]['project_worthy']) if node in self.graph else False

    def display_name(self, skill_id: str) -> str:
        node = _skill_node(skill_id)
        return self.graph.nodes[node]['name'] if node in self.graph else skill_id

    def resolve(self, identifiers: Iterable[str]) -> List[str]:
        """
        Maps free-form identifiers (ids, names or aliases, any case) to canonical skill ids.
        Raises UnknownSkill on the first identifier that cannot be matched.
        """
        resolved = []
        for identifier in identifiers:
            key = identifier.lower().strip()
            skill_id = self._lookup.get(key)
            if skill_id is None:
                raise UnknownSkill(identifier, self.suggest(identifier))
            if skill_id not in resolved:
                resolved.append(skill_id)
        return resolved

    def suggest(self, identifier: str, limit: int = 3) -> List[str]:
        """Closest known skill ids for an unknown identifier."""
        if not self._lookup:
            return []
        matches = process.extract(identifier.lower(), list(self._lookup.keys()), scorer=fuzz.ratio, limit=limit * 2)
        suggestions = []
        for candidate, score in matches:
            skill_id = self._lookup[candidate]
            if score >= SUGGESTION_THRESHOLD and skill_id not in suggestions:
                suggestions.append(skill_id)
        return suggestions[:limit]
