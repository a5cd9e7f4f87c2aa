"""Curriculum outline and topic selection."""

from .course_data import CURRICULUM_TOPICS, parse_outline
from .topic_tree import TopicTree, get_curriculum_tree

__all__ = ["CURRICULUM_TOPICS", "parse_outline", "TopicTree", "get_curriculum_tree"]
