"""Hierarchical topic selection over the static curriculum tree."""

from collections.abc import Iterable, Sequence
from functools import lru_cache

from study_quiz.curriculum.course_data import CURRICULUM_TOPICS
from study_quiz.models.quiz import CourseTopic


class TopicTree:
    """
    Lookup tables built once from an immutable topic forest.

    Topics are addressed by title, which is what selections, questions and
    history records carry. Titles must therefore be unique across the forest.
    """

    def __init__(self, roots: Sequence[CourseTopic]):
        self.roots: tuple[CourseTopic, ...] = tuple(roots)
        self._topics: dict[str, CourseTopic] = {}
        self._parent: dict[str, str | None] = {}
        self._children: dict[str, tuple[str, ...]] = {}
        self._part: dict[str, str] = {}
        self._order: list[str] = []

        for root in self.roots:
            self._index(root, None, root.id)

    def _index(self, topic: CourseTopic, parent: str | None, part_id: str) -> None:
        if topic.title in self._topics:
            raise ValueError(f"Duplicate topic title: {topic.title!r}")
        self._topics[topic.title] = topic
        self._parent[topic.title] = parent
        self._children[topic.title] = tuple(t.title for t in topic.sub_topics)
        self._part[topic.title] = part_id
        self._order.append(topic.title)
        for child in topic.sub_topics:
            self._index(child, topic.title, part_id)

    # Queries

    def __contains__(self, title: object) -> bool:
        return title in self._topics

    def find(self, title: str) -> CourseTopic:
        try:
            return self._topics[title]
        except KeyError:
            raise KeyError(f"Unknown topic: {title!r}") from None

    def parent_of(self, title: str) -> str | None:
        return self._parent.get(title)

    def children_of(self, title: str) -> tuple[str, ...]:
        return self._children.get(title, ())

    def is_leaf(self, title: str) -> bool:
        return title in self._topics and not self._children[title]

    def part_of(self, title: str) -> str | None:
        """Identifier of the top-level part a topic belongs to."""
        return self._part.get(title)

    def part_ids(self) -> list[str]:
        return [root.id for root in self.roots]

    def all_titles(self) -> list[str]:
        """Every title in pre-order."""
        return list(self._order)

    def leaf_titles(self) -> list[str]:
        return [t for t in self._order if not self._children[t]]

    def descendants(self, title: str) -> list[str]:
        """All titles below a topic, pre-order, excluding the topic itself."""
        result: list[str] = []
        for child in self.children_of(title):
            result.append(child)
            result.extend(self.descendants(child))
        return result

    # Selection

    def toggle(
        self, selected: Iterable[str], topic: CourseTopic | str, checked: bool
    ) -> frozenset[str]:
        """
        Check or uncheck a topic and keep the selection consistent.

        The topic and its whole subtree follow the new state. Ancestors are
        then re-derived: on check, a parent is selected once all its direct
        children are; on uncheck, every ancestor is dropped. A toggle that
        would leave nothing selected is rejected.

        Args:
            selected: Currently selected titles
            topic: Topic node or title being toggled
            checked: Desired state

        Returns:
            The new selection, or the previous one if the toggle was rejected
        """
        previous = frozenset(selected)
        title = topic.title if isinstance(topic, CourseTopic) else topic
        self.find(title)

        subtree = [title, *self.descendants(title)]
        updated = set(previous)
        if checked:
            updated.update(subtree)
        else:
            updated.difference_update(subtree)

        parent = self.parent_of(title)
        while parent is not None:
            if checked:
                if not all(child in updated for child in self.children_of(parent)):
                    break
                updated.add(parent)
            else:
                updated.discard(parent)
            parent = self.parent_of(parent)

        if not updated:
            return previous
        return frozenset(updated)

    def leaf_filter(self, selected_titles: Iterable[str]) -> list[str]:
        """Selected titles that are leaves, in input order without repeats."""
        seen: set[str] = set()
        leaves: list[str] = []
        for title in selected_titles:
            if title in seen or not self.is_leaf(title):
                continue
            seen.add(title)
            leaves.append(title)
        return leaves

    def expand_weak_topics(self, weak_topic_titles: Iterable[str]) -> list[str]:
        """Each weak topic plus all of its descendants, without repeats."""
        expanded: dict[str, None] = {}
        for title in weak_topic_titles:
            expanded.setdefault(title, None)
            for descendant in self.descendants(title):
                expanded.setdefault(descendant, None)
        return list(expanded)


@lru_cache
def get_curriculum_tree() -> TopicTree:
    """Tree over the built-in curriculum, built on first use."""
    return TopicTree(CURRICULUM_TOPICS)
