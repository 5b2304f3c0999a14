"""
Insights Service - per-user project statistics and technology trends.

Technology names are normalized before counting so "react", "React " and
"REACT" land in one bucket, and the usual spellings of multi-word or dotted
names ("nodejs", "tailwind") map to their display form.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Dict, Iterable, List, Optional, Tuple
from urllib.parse import quote_plus

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.clock import utcnow
from app.core.config import settings
from app.core.exceptions import UserNotFoundError
from app.core.logging_config import logger
from app.core.types import is_valid_uuid
from app.models.project import Project, ProjectVisibility
from app.models.user import User, user_friends

# Title-cased spelling -> display name
TECH_ALIASES = {
    "Mongodb": "MongoDB",
    "Nodejs": "Node.js",
    "Nextjs": "Next.js",
    "Postgresql": "PostgreSQL",
    "Graphql": "GraphQL",
    "Socketio": "Socket.io",
    "Tailwindcss": "Tailwind CSS",
    "Tailwind": "Tailwind CSS",
    "Tailwind css": "Tailwind CSS",
    "Typescript": "TypeScript",
    "Aws": "AWS",
}


def normalize_tech_name(name: Optional[str]) -> Optional[str]:
    if not name or not name.strip():
        return None
    cleaned = name.strip()
    title = cleaned[0].upper() + cleaned[1:].lower()
    return TECH_ALIASES.get(title, title)


def count_technologies(tech_stacks: Iterable[Iterable[str]]) -> List[Tuple[str, int]]:
    """(name, count) pairs, most used first; ties keep first-seen order"""
    counts: Counter = Counter()
    for stack in tech_stacks:
        for tech in stack or []:
            normalized = normalize_tech_name(tech)
            if normalized:
                counts[normalized] += 1
    return sorted(counts.items(), key=lambda item: -item[1])


@dataclass(frozen=True)
class TechnologyInfo:
    summary: str
    why: str
    difficulty: str
    related: Tuple[str, ...]
    docs_url: str

    def to_dict(self) -> dict:
        return {
            "summary": self.summary,
            "why": self.why,
            "difficulty": self.difficulty,
            "related": list(self.related),
            "docsUrl": self.docs_url,
        }


TECH_METADATA: Dict[str, TechnologyInfo] = {
    "React": TechnologyInfo(
        "A JavaScript library for building user interfaces with component-based architecture",
        "Fast, flexible, and has a massive ecosystem. Perfect for building modern, interactive web applications.",
        "Intermediate", ("Next.js", "Redux", "TypeScript", "Tailwind CSS"), "https://react.dev",
    ),
    "Node.js": TechnologyInfo(
        "JavaScript runtime built on Chrome's V8 engine for building scalable server-side applications",
        "Enables full-stack JavaScript development, has excellent performance, and a huge package "
        "ecosystem via npm.",
        "Intermediate", ("Express", "MongoDB", "TypeScript", "Socket.io"), "https://nodejs.org",
    ),
    "MongoDB": TechnologyInfo(
        "A NoSQL document database that stores data in flexible, JSON-like documents",
        "Flexible schema, scales horizontally, and works seamlessly with JavaScript/Node.js applications.",
        "Beginner", ("Mongoose", "Node.js", "Express", "Redis"), "https://www.mongodb.com/docs",
    ),
    "Express": TechnologyInfo(
        "Fast, unopinionated web framework for Node.js applications",
        "Minimal, flexible, and provides robust features for web and mobile applications.",
        "Beginner", ("Node.js", "MongoDB", "JWT", "Passport"), "https://expressjs.com",
    ),
    "TypeScript": TechnologyInfo(
        "Typed superset of JavaScript that compiles to plain JavaScript",
        "Adds static typing, better IDE support, and catches errors at compile time instead of runtime.",
        "Intermediate", ("React", "Node.js", "Angular", "Next.js"), "https://www.typescriptlang.org",
    ),
    "Tailwind CSS": TechnologyInfo(
        "Utility-first CSS framework for rapidly building custom user interfaces",
        "Fast development, consistent design, and no need to write custom CSS for most use cases.",
        "Beginner", ("React", "Next.js", "Vue", "PostCSS"), "https://tailwindcss.com",
    ),
    "Docker": TechnologyInfo(
        "Platform for developing, shipping, and running applications in containers",
        "Ensures consistency across environments, simplifies deployment, and improves scalability.",
        "Intermediate", ("Kubernetes", "Docker Compose", "CI/CD", "Linux"), "https://docs.docker.com",
    ),
    "PostgreSQL": TechnologyInfo(
        "Powerful, open-source relational database system",
        "ACID compliant, supports complex queries, and has excellent data integrity features.",
        "Intermediate", ("SQL", "Node.js", "Prisma", "Redis"), "https://www.postgresql.org/docs",
    ),
    "Next.js": TechnologyInfo(
        "React framework with server-side rendering and static site generation",
        "Built-in routing, API routes, excellent performance, and SEO-friendly out of the box.",
        "Intermediate", ("React", "TypeScript", "Vercel", "Tailwind CSS"), "https://nextjs.org/docs",
    ),
    "Python": TechnologyInfo(
        "High-level programming language known for its simplicity and versatility",
        "Easy to learn, extensive libraries, and used in web dev, data science, AI, and automation.",
        "Beginner", ("Django", "Flask", "FastAPI", "NumPy"), "https://docs.python.org",
    ),
    "Vue": TechnologyInfo(
        "Progressive JavaScript framework for building user interfaces",
        "Easy to learn, flexible, and has excellent documentation with a gentle learning curve.",
        "Beginner", ("Nuxt.js", "Vuex", "TypeScript", "Tailwind CSS"), "https://vuejs.org",
    ),
    "Angular": TechnologyInfo(
        "TypeScript-based web application framework by Google",
        "Complete solution with built-in tools, strong typing, and great for enterprise applications.",
        "Advanced", ("TypeScript", "RxJS", "NgRx", "Material UI"), "https://angular.io/docs",
    ),
    "Django": TechnologyInfo(
        "High-level Python web framework that encourages rapid development",
        "Batteries included, secure by default, and excellent for building robust web applications quickly.",
        "Intermediate", ("Python", "PostgreSQL", "REST", "Celery"), "https://docs.djangoproject.com",
    ),
    "Flask": TechnologyInfo(
        "Lightweight WSGI web application framework in Python",
        "Minimal, flexible, and perfect for small to medium applications or microservices.",
        "Beginner", ("Python", "SQLAlchemy", "Jinja2", "REST"), "https://flask.palletsprojects.com",
    ),
    "Redis": TechnologyInfo(
        "In-memory data structure store used as database, cache, and message broker",
        "Extremely fast, supports various data structures, and perfect for caching and real-time applications.",
        "Intermediate", ("Node.js", "Python", "Docker", "MongoDB"), "https://redis.io/docs",
    ),
    "GraphQL": TechnologyInfo(
        "Query language for APIs and runtime for executing those queries",
        "Fetch exactly what you need, strongly typed, and reduces over-fetching of data.",
        "Intermediate", ("Apollo", "React", "Node.js", "TypeScript"), "https://graphql.org/learn",
    ),
    "AWS": TechnologyInfo(
        "Amazon Web Services - comprehensive cloud computing platform",
        "Scalable, reliable, and offers a wide range of services for any application need.",
        "Advanced", ("Docker", "Kubernetes", "Terraform", "CI/CD"), "https://docs.aws.amazon.com",
    ),
    "Firebase": TechnologyInfo(
        "Google's platform for building mobile and web applications",
        "Real-time database, authentication, hosting, and more, all in one platform.",
        "Beginner", ("React", "Angular", "Flutter", "Node.js"), "https://firebase.google.com/docs",
    ),
    "Prisma": TechnologyInfo(
        "Next-generation ORM for Node.js and TypeScript",
        "Type-safe database access, auto-generated queries, and excellent developer experience.",
        "Intermediate", ("TypeScript", "PostgreSQL", "Node.js", "GraphQL"), "https://www.prisma.io/docs",
    ),
    "Socket.io": TechnologyInfo(
        "Library for real-time, bidirectional communication between clients and servers",
        "Easy to use, works across platforms, and perfect for chat apps and real-time features.",
        "Intermediate", ("Node.js", "Express", "React", "WebSocket"), "https://socket.io/docs",
    ),
}


def tech_metadata(name: str) -> TechnologyInfo:
    """Known description, or a generic one pointing at a documentation search"""
    known = TECH_METADATA.get(name)
    if known:
        return known
    return TechnologyInfo(
        summary=f"{name} is a technology used in modern software development",
        why="Developers choose this technology for its unique features and capabilities in building applications.",
        difficulty="Intermediate",
        related=("JavaScript", "TypeScript", "React", "Node.js"),
        docs_url=f"https://www.google.com/search?q={quote_plus(name)}+documentation",
    )


@dataclass
class UserInsights:
    total_projects: int
    total_likes: int
    total_comments: int
    friends_count: int
    distinct_tech_stack: List[str]
    most_used_tech: Optional[str]
    top_project: Optional[Project]

    def to_dict(self) -> dict:
        top = self.top_project
        return {
            "totalProjects": self.total_projects,
            "totalLikes": self.total_likes,
            "totalComments": self.total_comments,
            "friendsCount": self.friends_count,
            "distinctTechStack": self.distinct_tech_stack,
            "mostUsedTech": self.most_used_tech,
            "topProject": {
                "id": top.id,
                "title": top.title,
                "likes": top.likes_count,
                "comments": top.comments_count,
            } if top else None,
        }


@dataclass
class TechnologyDetail:
    name: str
    info: TechnologyInfo
    monthly_projects: int
    projects: List[Project] = field(default_factory=list)


class InsightsService:
    """Read-only aggregations over projects"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def user_insights(self, user_id: str) -> UserInsights:
        user = await self.db.get(User, user_id) if is_valid_uuid(user_id) else None
        if not user:
            raise UserNotFoundError(user_id)

        result = await self.db.execute(
            select(Project).where(Project.owner_id == user.id).order_by(Project.created_at.asc())
        )
        projects = list(result.scalars().all())
        friends = (
            await self.db.execute(select(user_friends.c.friend_id).where(user_friends.c.user_id == user.id))
        ).scalars().all()

        # Raw names, first-seen order; the most used wins ties by appearing first
        usage: Counter = Counter()
        for project in projects:
            usage.update(project.tech_stack or [])
        most_used = max(usage, key=lambda tech: usage[tech]) if usage else None

        top_project = None
        if projects:
            top_project = sorted(
                projects, key=lambda p: (-p.likes_count, -p.comments_count)
            )[0]

        return UserInsights(
            total_projects=len(projects),
            total_likes=sum(p.likes_count for p in projects),
            total_comments=sum(p.comments_count for p in projects),
            friends_count=len(friends),
            distinct_tech_stack=list(usage),
            most_used_tech=most_used,
            top_project=top_project,
        )

    async def _public_projects(self, since=None) -> List[Project]:
        query = select(Project).where(Project.visibility == ProjectVisibility.PUBLIC)
        if since is not None:
            query = query.where(Project.created_at >= since)
        result = await self.db.execute(query.order_by(Project.created_at.desc()))
        return list(result.scalars().all())

    async def technologies(self) -> List[Tuple[str, int]]:
        """Usage of every technology across public projects"""
        projects = await self._public_projects()
        return count_technologies(p.tech_stack for p in projects)

    async def trending(self) -> List[Tuple[str, int]]:
        since = utcnow() - timedelta(days=settings.TRENDING_WINDOW_DAYS)
        projects = await self._public_projects(since)
        return count_technologies(p.tech_stack for p in projects)[:settings.TRENDING_LIMIT]

    async def technology_detail(self, tech_name: str) -> TechnologyDetail:
        """Public projects using a technology, newest first"""
        name = normalize_tech_name(tech_name) or tech_name
        wanted = tech_name.strip().lower()
        projects = [
            p for p in await self._public_projects()
            if any(
                tech.strip().lower() == wanted or normalize_tech_name(tech) == name
                for tech in p.tech_stack or []
            )
        ]
        month_ago = utcnow() - timedelta(days=settings.TECHNOLOGY_MONTHLY_WINDOW_DAYS)
        monthly = sum(1 for p in projects if p.created_at >= month_ago)

        logger.debug(f"[InsightsService] {name}: {len(projects)} projects, {monthly} this month")
        return TechnologyDetail(
            name=name,
            info=tech_metadata(name),
            monthly_projects=monthly,
            projects=projects,
        )
