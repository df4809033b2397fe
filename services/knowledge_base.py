"""
Knowledge Base - Published help articles and keyword relevance
==============================================================

This module wraps the knowledge_base table for the chat assistant:
- Typed Article records normalised at the store boundary
- Keyword relevance filter used by the chat assistant
- Title/content search with category filter for browsing
- Sample article seeding
"""

from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any, Iterable

from core.database import Database
from core.exceptions import DatabaseError, InvalidInputError, KnowledgeBaseError
from core.logging import get_logger

logger = get_logger("services.knowledge_base")


ARTICLE_CATEGORIES = (
    "general",
    "scooter_models",
    "maintenance",
    "safety",
    "troubleshooting",
    "battery",
    "charging",
    "regulations",
    "accessories",
)

DEFAULT_CATEGORY = "general"


@dataclass
class Article:
    """
    A knowledge base article.

    Attributes:
        title (str): Article title
        content (str): Article body
        category (str): One of ARTICLE_CATEGORIES for articles created here
        tags (list): Ordered tags, empty strings removed
        is_published (bool): Visible to the chat assistant
        id (int): Store identifier, None until stored
    """
    title: str
    content: str
    category: str = DEFAULT_CATEGORY
    tags: List[str] = field(default_factory=list)
    is_published: bool = False
    id: Optional[int] = None

    @property
    def searchable_text(self) -> str:
        """Title, content and tags joined by spaces, lower-cased."""
        return f"{self.title} {self.content} {' '.join(self.tags)}".lower()

    def is_relevant_to(self, message: str) -> bool:
        """
        Keyword relevance test against a chat message.

        Relevant when the whole message appears in the article text,
        when the message mentions the article's category, or when
        the message mentions any of its tags.

        Args:
            message: Raw chat message

        Returns:
            True if the article is relevant
        """
        message_lower = message.lower()

        if message_lower in self.searchable_text:
            return True

        if self.category in message_lower:
            return True

        return any(tag.lower() in message_lower for tag in self.tags)

    def summary(self) -> Dict[str, str]:
        """Title and category, as shown next to a chat reply."""
        return {"title": self.title, "category": self.category}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
            "is_published": self.is_published,
        }

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Article":
        """
        Build an Article from a store row, defaulting missing fields.

        Args:
            row: Dictionary as returned by the database layer

        Returns:
            Article instance
        """
        tags = row.get("tags") or []
        if isinstance(tags, str):
            tags = [tags]
        elif not isinstance(tags, (list, tuple)):
            logger.warning(f"Article {row.get('id')} has malformed tags {tags!r}, ignoring them")
            tags = []

        # Unlike a raw substring test, empty tags and a blank category are
        # not kept: an empty string would make the article match any message.
        return cls(
            title=str(row.get("title") or ""),
            content=str(row.get("content") or ""),
            category=str(row.get("category") or DEFAULT_CATEGORY),
            tags=[str(tag) for tag in tags if tag],
            is_published=bool(row.get("is_published", False)),
            id=row.get("id"),
        )


SAMPLE_ARTICLES = (
    Article(
        title="How to Check Battery Status",
        content=(
            "To check your scooter's battery status:\n"
            "1. Turn on your scooter\n"
            "2. Check the LED indicator on the dashboard\n"
            "3. Green lights indicate full charge\n"
            "4. Red lights indicate low battery\n"
            "5. If no lights appear, the battery may be completely drained"
        ),
        category="battery",
        tags=["battery", "status", "indicator", "LED"],
        is_published=True,
    ),
    Article(
        title="Proper Charging Procedures",
        content=(
            "Follow these steps for optimal battery charging:\n"
            "1. Use only the provided charger\n"
            "2. Plug into a dry, well-ventilated area\n"
            "3. Charging time is typically 3-4 hours\n"
            "4. Unplug when fully charged\n"
            "5. Avoid overcharging to extend battery life"
        ),
        category="charging",
        tags=["charging", "battery", "maintenance", "safety"],
        is_published=True,
    ),
    Article(
        title="Scooter Won't Start - Troubleshooting",
        content=(
            "If your scooter won't start, try these steps:\n"
            "1. Check if the power button is pressed and held\n"
            "2. Ensure the kickstand is up\n"
            "3. Verify the battery is charged\n"
            "4. Check for any error codes on display\n"
            "5. Inspect the brake levers - they should be released\n"
            "6. Contact support if issues persist"
        ),
        category="troubleshooting",
        tags=["troubleshooting", "start", "power", "kickstand"],
        is_published=True,
    ),
    Article(
        title="Daily Maintenance Checklist",
        content=(
            "Perform these checks before each ride:\n"
            "1. Tire pressure and condition\n"
            "2. Brake function test\n"
            "3. Battery charge level\n"
            "4. Lights and signals working\n"
            "5. Steering and folding mechanism\n"
            "6. Clean any debris from wheels"
        ),
        category="maintenance",
        tags=["maintenance", "daily", "checklist", "safety"],
        is_published=True,
    ),
    Article(
        title="Safety Equipment and Guidelines",
        content=(
            "Essential safety guidelines:\n"
            "1. Always wear a helmet\n"
            "2. Use reflective clothing in low light\n"
            "3. Follow local traffic laws\n"
            "4. Stay in bike lanes when available\n"
            "5. Avoid riding in rain or wet conditions\n"
            "6. Regular safety equipment inspection"
        ),
        category="safety",
        tags=["safety", "helmet", "traffic", "visibility"],
        is_published=True,
    ),
)


def find_relevant_articles(message: str, articles: Iterable[Article]) -> List[Article]:
    """
    Filter articles down to those relevant to a message.

    No ranking is applied: the result keeps the order of ``articles``,
    which is the store's iteration order.

    Args:
        message: Raw chat message
        articles: Published articles

    Returns:
        Relevant articles in input order
    """
    return [article for article in articles if article.is_relevant_to(message)]


class KnowledgeBase:
    """
    Read and seed access to the knowledge base table.

    Example:
        kb = KnowledgeBase(database)
        articles = kb.published_articles()
        relevant = kb.find_relevant("my helmet strap broke", articles)
    """

    def __init__(self, database: Database):
        """
        Initialize knowledge base access.

        Args:
            database: Database holding the knowledge_base table
        """
        self.database = database

    def fetch_published(self) -> List[Article]:
        """
        Load every published article.

        Returns:
            Published articles in store order

        Raises:
            KnowledgeBaseError: If the store cannot be read
        """
        try:
            rows = self.database.get_published_articles()
        except DatabaseError as e:
            raise KnowledgeBaseError("Failed to load published articles", {"cause": str(e)})

        return [Article.from_row(row) for row in rows]

    def published_articles(self) -> List[Article]:
        """
        Load every published article, degrading to an empty list.

        Read failures are logged and never raised, so the chat
        assistant can still answer from its rule table or fallback.

        Returns:
            Published articles in store order, or [] on failure
        """
        try:
            return self.fetch_published()
        except Exception as e:
            logger.error(f"Knowledge base query error: {e}")
            return []

    def find_relevant(self, message: str, articles: Optional[List[Article]] = None) -> List[Article]:
        """
        Relevant published articles for a message.

        Args:
            message: Raw chat message
            articles: Articles to filter (loaded from the store when None)

        Returns:
            Relevant articles in store order
        """
        if articles is None:
            articles = self.published_articles()
        return find_relevant_articles(message, articles)

    def add_article(
        self,
        title: str,
        content: str,
        category: str = DEFAULT_CATEGORY,
        tags: Optional[List[str]] = None,
        is_published: bool = False
    ) -> Article:
        """
        Store a new article.

        Args:
            title: Article title
            content: Article body
            category: One of ARTICLE_CATEGORIES
            tags: Ordered tags
            is_published: Whether the chat assistant may use it

        Returns:
            The stored Article

        Raises:
            InvalidInputError: If title or content is empty or the category is unknown
        """
        if not title or not content:
            raise InvalidInputError("Article title and content are required")

        if category not in ARTICLE_CATEGORIES:
            raise InvalidInputError(
                f"Unknown article category: {category}",
                {"allowed": list(ARTICLE_CATEGORIES)}
            )

        clean_tags = [tag.strip() for tag in (tags or []) if tag and tag.strip()]
        article_id = self.database.add_article(
            title=title,
            content=content,
            category=category,
            tags=clean_tags,
            is_published=is_published,
        )

        logger.info(f"Added article {article_id}: {title}")

        return Article(
            title=title,
            content=content,
            category=category,
            tags=clean_tags,
            is_published=is_published,
            id=article_id,
        )

    def search(self, term: str = "", category: str = "all") -> List[Article]:
        """
        Browse articles by text and category.

        Matches articles whose title or content contains ``term``
        (case-insensitive). ``category="all"`` disables the category
        filter. Drafts are included.

        Args:
            term: Search text (empty matches everything)
            category: Category name or "all"

        Returns:
            Matching articles in store order
        """
        rows = self.database.get_articles(
            category=None if category == "all" else category
        )
        term_lower = term.lower()

        results = []
        for row in rows:
            article = Article.from_row(row)
            if term_lower in article.title.lower() or term_lower in article.content.lower():
                results.append(article)
        return results

    def seed_sample_articles(self) -> int:
        """
        Insert the sample help articles unless any of them exist.

        All five go in one transaction, so a failed seed leaves nothing
        behind and can be retried.

        Returns:
            Number of articles inserted (0 when already seeded)
        """
        titles = [article.title for article in SAMPLE_ARTICLES]
        existing = self.database.get_article_titles(titles)

        if existing:
            logger.info(f"Sample articles already present ({len(existing)} found), skipping seed")
            return 0

        self.database.add_articles([article.to_dict() for article in SAMPLE_ARTICLES])

        logger.info(f"Seeded {len(SAMPLE_ARTICLES)} sample articles")
        return len(SAMPLE_ARTICLES)
