from __future__ import annotations

import re
from collections import Counter
from itertools import combinations
from typing import Sequence

from ..config import EngineConfig
from ..models import Question, ThematicGroup
from ..vocab import Vocabulary

_WORD_RE = re.compile(r"\w+")


def theme_terms(text: str, vocabulary: Vocabulary, min_length: int = 4) -> list[str]:
    """Distinct lowercase words of a question text, in order, minus theme stop words."""
    words = _WORD_RE.findall(text.lower())
    kept = (w for w in words if len(w) >= min_length and w not in vocabulary.theme_stop_words)
    return list(dict.fromkeys(kept))


class _UnionFind:
    def __init__(self, n: int) -> None:
        self.parent = list(range(n))

    def find(self, i: int) -> int:
        while self.parent[i] != i:
            self.parent[i] = self.parent[self.parent[i]]
            i = self.parent[i]
        return i

    def union(self, i: int, j: int) -> None:
        ri, rj = self.find(i), self.find(j)
        if ri != rj:
            # Lower index stays the root so groups are ordered by first member.
            self.parent[max(ri, rj)] = min(ri, rj)


def group_by_theme(
    questions: Sequence[Question],
    config: EngineConfig,
    vocabulary: Vocabulary,
) -> tuple[list[ThematicGroup], list[str]]:
    """
    Link questions whose display texts share enough terms and return the
    connected groups (two or more questions) plus the most repeated terms.
    """
    terms = [theme_terms(q.text, vocabulary, config.theme_min_term_length) for q in questions]
    uf = _UnionFind(len(questions))
    shared_by_root: dict[int, set[str]] = {}
    links: list[tuple[int, int, set[str]]] = []

    for i, j in combinations(range(len(questions)), 2):
        shared = set(terms[i]) & set(terms[j])
        if len(shared) >= config.theme_min_shared_terms:
            uf.union(i, j)
            links.append((i, j, shared))

    for i, _, shared in links:
        shared_by_root.setdefault(uf.find(i), set()).update(shared)

    members: dict[int, list[int]] = {}
    for i in range(len(questions)):
        members.setdefault(uf.find(i), []).append(i)

    groups: list[ThematicGroup] = []
    for root in sorted(members):
        idx = members[root]
        if len(idx) < 2:
            continue
        groups.append(
            ThematicGroup(
                id=f"theme_{len(groups) + 1}",
                question_ids=[questions[i].id for i in idx],
                shared_terms=sorted(shared_by_root.get(root, set())),
            )
        )

    presence = Counter(t for ts in terms for t in ts)
    repeated = [t for t, n in sorted(presence.items(), key=lambda kv: -kv[1]) if n >= 2]
    return groups, repeated[: config.repeated_terms_top]
