"""
Subject catalog for the Sri Lankan O-Level curriculum.

52 subjects as a flat, read-only table. The catalog is built once per process
(get_catalog) and handed to whatever needs lookups, so tests can pass their own.
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Optional

LITERATURE_KEYWORDS = ("literature", "literary")
LITERATURE_SUFFIXES = ("_literary_texts", "_language_literature")

# Query words shorter than this only match whole aliases
MIN_PARTIAL_WORD = 3

_LITERARY_TEXTS = (
    "english_literary_texts",
    "sinhala_literary_texts",
    "tamil_literary_texts",
    "arabic_literary_texts",
)
_TECHNOLOGY = (
    "ict",
    "agriculture_food_technology",
    "design_construction",
    "design_mechanical",
    "design_electrical_electronic",
)
_RELIGIONS = ("buddhism", "catholicism", "saivanery", "christianity", "islam")

# Category words that name a group of subjects without appearing in them
SUBJECT_GROUPS: dict[str, tuple[str, ...]] = {
    "literature": _LITERARY_TEXTS,
    "literary": _LITERARY_TEXTS,
    "lit": _LITERARY_TEXTS,
    "music": ("music_oriental", "music_western", "music_carnatic"),
    "dance": ("dancing_oriental", "dancing_bharata"),
    "dancing": ("dancing_oriental", "dancing_bharata"),
    "design": ("design_construction", "design_mechanical", "design_electrical_electronic"),
    "technology": _TECHNOLOGY,
    "tech": _TECHNOLOGY,
    "language": (
        "english",
        "sinhala_language_literature",
        "tamil_language_literature",
        "second_language_sinhala",
        "second_language_tamil",
    ),
    "religion": _RELIGIONS,
    "religious": _RELIGIONS,
}


@dataclass(frozen=True)
class Subject:
    id: str
    display_name: str
    search_terms: tuple[str, ...] = ()


SUBJECTS: tuple[Subject, ...] = (
    # Religion
    Subject("buddhism", "Buddhism", ("buddhism", "buddha", "dharma")),
    Subject("catholicism", "Catholicism", ("catholicism", "catholic")),
    Subject("saivanery", "Saivanery", ("saivanery", "saiva", "hindu")),
    Subject("christianity", "Christianity", ("christianity", "christian", "bible")),
    Subject("islam", "Islam", ("islam", "muslim", "quran")),

    # Core
    Subject("english", "English", ("english", "eng")),
    Subject(
        "sinhala_language_literature",
        "Sinhala Language & Literature",
        ("sinhala", "sinhala language", "sinhala literature"),
    ),
    Subject(
        "tamil_language_literature",
        "Tamil Language & Literature",
        ("tamil", "tamil language", "tamil literature"),
    ),
    Subject("mathematics", "Mathematics", ("mathematics", "maths", "math")),
    Subject("history", "History", ("history",)),
    Subject("science", "Science", ("science", "general science")),

    # Category I
    Subject("civic_education", "Civic Education", ("civic education", "civics")),
    Subject(
        "business_accounting",
        "Business & Accounting Studies",
        ("business", "accounting", "commerce"),
    ),
    Subject("geography", "Geography", ("geography", "geo")),
    Subject(
        "entrepreneurship",
        "Entrepreneurship Studies",
        ("entrepreneurship", "business studies"),
    ),
    Subject(
        "second_language_sinhala",
        "Second Language (Sinhala)",
        ("second language sinhala", "sinhala second"),
    ),
    Subject(
        "second_language_tamil",
        "Second Language (Tamil)",
        ("second language tamil", "tamil second"),
    ),
    Subject("pali", "Pali", ("pali",)),
    Subject("sanskrit", "Sanskrit", ("sanskrit",)),
    Subject("french", "French", ("french",)),
    Subject("german", "German", ("german",)),
    Subject("hindi", "Hindi", ("hindi",)),
    Subject("japanese", "Japanese", ("japanese",)),
    Subject("arabic", "Arabic", ("arabic",)),
    Subject("korean", "Korean", ("korean",)),
    Subject("chinese", "Chinese", ("chinese",)),
    Subject("russian", "Russian", ("russian",)),
    # TODO: confirm Malay against the published O-Level syllabus and replace it if it is not offered
    Subject("malay", "Malay", ("malay",)),

    # Category II
    Subject("art", "Art", ("art", "drawing", "painting")),
    Subject("music_oriental", "Music (Oriental)", ("music oriental", "oriental music")),
    Subject("music_western", "Music (Western)", ("music western", "western music")),
    Subject("music_carnatic", "Music (Carnatic)", ("music carnatic", "carnatic music")),
    Subject(
        "dancing_oriental",
        "Art Dancing (Oriental)",
        ("dancing oriental", "oriental dancing", "art dancing"),
    ),
    Subject(
        "dancing_bharata",
        "Dancing (Bharata)",
        ("dancing bharata", "bharata dancing", "bharatanatyam"),
    ),
    Subject(
        "english_literary_texts",
        "Appreciation of English Literary Texts",
        ("english literature", "english literary texts", "literature", "lit"),
    ),
    Subject(
        "sinhala_literary_texts",
        "Appreciation of Sinhala Literary Texts",
        ("sinhala literature", "sinhala literary texts", "literature", "lit"),
    ),
    Subject(
        "tamil_literary_texts",
        "Appreciation of Tamil Literary Texts",
        ("tamil literature", "tamil literary texts", "literature", "lit"),
    ),
    Subject(
        "arabic_literary_texts",
        "Appreciation of Arabic Literary Texts",
        ("arabic literature", "arabic literary texts", "literature", "lit"),
    ),
    Subject("drama_theatre", "Drama and Theatre", ("drama", "theatre", "drama and theatre")),

    # Category III
    Subject(
        "ict",
        "Information & Communication Technology",
        ("ict", "information technology", "computer", "computing"),
    ),
    Subject(
        "agriculture_food_technology",
        "Agriculture & Food Technology",
        ("agriculture", "food technology", "farming"),
    ),
    Subject(
        "aquatic_bioresources",
        "Aquatic Bioresources Technology",
        ("aquatic bioresources", "aquatic resources", "marine biology"),
    ),
    Subject("art_crafts", "Art & Crafts", ("art and crafts", "arts", "crafts")),
    Subject("home_economics", "Home Economics", ("home economics", "home science")),
    Subject(
        "health_physical_education",
        "Health & Physical Education",
        ("health and physical education", "physical education", "sports", "pe"),
    ),
    Subject(
        "communication_media",
        "Communication & Media Studies",
        ("communication and media", "media studies"),
    ),
    Subject(
        "design_construction",
        "Design & Construction Technology",
        ("design and construction", "construction technology"),
    ),
    Subject(
        "design_mechanical",
        "Design & Mechanical Technology",
        ("design and mechanical", "mechanical technology"),
    ),
    Subject(
        "design_electrical_electronic",
        "Design, Electrical & Electronic Technology",
        (
            "design electrical electronic",
            "electrical technology",
            "electronic technology",
            "electronics",
        ),
    ),
    Subject(
        "electronic_writing_sinhala",
        "Electronic Writing & Shorthand (Sinhala)",
        ("electronic writing sinhala", "shorthand sinhala", "sinhala shorthand"),
    ),
    Subject(
        "electronic_writing_tamil",
        "Electronic Writing & Shorthand (Tamil)",
        ("electronic writing tamil", "shorthand tamil", "tamil shorthand"),
    ),
    Subject(
        "electronic_writing_english",
        "Electronic Writing & Shorthand (English)",
        ("electronic writing english", "shorthand english", "english shorthand"),
    ),
)


def _word_runs(words: list[str]) -> Iterable[str]:
    """Contiguous word runs of a query, longest first."""
    for size in range(len(words), 0, -1):
        for start in range(len(words) - size + 1):
            yield " ".join(words[start:start + size])


class SubjectCatalog:
    """Read-only lookups over a fixed list of subjects."""

    def __init__(self, subjects: Iterable[Subject] = SUBJECTS):
        self._subjects = tuple(subjects)
        self._by_id = {s.id: s for s in self._subjects}

    def __iter__(self):
        return iter(self._subjects)

    def __len__(self) -> int:
        return len(self._subjects)

    def get(self, subject_id: str) -> Optional[Subject]:
        return self._by_id.get(subject_id)

    def is_valid(self, subject_id: str) -> bool:
        return subject_id in self._by_id

    def ids(self) -> list[str]:
        return [s.id for s in self._subjects]

    def display_name(self, subject_id: str) -> str:
        subject = self.get(subject_id)
        return subject.display_name if subject else subject_id

    def exact_match(self, query: str) -> Optional[str]:
        """
        The subject a query names outright, or None.

        The whole query is compared against ids, display names and aliases
        ("maths" → mathematics). If nothing matches, word runs of the query
        are compared against ids and display names, longest run first, so
        "mathematics past papers" still resolves to mathematics.
        """
        normalized = query.strip().lower()
        if not normalized:
            return None

        for s in self._subjects:
            if (
                s.id == normalized
                or s.display_name.lower() == normalized
                or any(term.lower() == normalized for term in s.search_terms)
            ):
                return s.id

        words = normalized.split()
        if len(words) < 2:
            return None
        for run in _word_runs(words):
            for s in self._subjects:
                if s.id == run or s.display_name.lower() == run:
                    return s.id
        return None

    def fuzzy_match(self, query: str) -> list[str]:
        """
        Subjects related to a query, in catalog order.

        A subject matches when the query names one of its groups ("religion",
        "dance", "tech"), when the query or any query word of 3+ characters
        appears in its id, display name or aliases ("agri notes" finds
        agriculture), or when one of its aliases is a whole word run of the query.
        """
        normalized = query.strip().lower()
        if not normalized:
            return []

        grouped = set(SUBJECT_GROUPS.get(normalized, ()))
        words = [w for w in normalized.split() if len(w) >= MIN_PARTIAL_WORD]
        padded = f" {' '.join(normalized.split())} "
        matched = []
        for s in self._subjects:
            terms = [term.lower() for term in s.search_terms]
            fields = (s.id, s.display_name.lower(), *terms)
            if (
                s.id in grouped
                or any(normalized in f for f in fields)
                or any(word in f for word in words for f in fields)
                # short aliases ("pe", "lit") only as whole words: "pe" must not hit "papers"
                or any(f" {term} " in padded for term in terms if term)
            ):
                matched.append(s.id)
        return matched

    def literature_subject_ids(self) -> list[str]:
        return [s.id for s in self._subjects if s.id.endswith(LITERATURE_SUFFIXES)]


def is_literature_query(query: str) -> bool:
    normalized = query.strip().lower()
    return any(keyword in normalized for keyword in LITERATURE_KEYWORDS)


@lru_cache
def get_catalog() -> SubjectCatalog:
    return SubjectCatalog()
