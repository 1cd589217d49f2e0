"""
Seed data - roles, categories, tags, demo users and directory tools.

Seeding is idempotent: rows are matched on their natural key (slug, email,
tool name) and existing rows are left untouched.
"""

from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger

from app.db.models import AiTool, Category, Role, Tag, User
from app.services.auth import hash_password

logger = get_logger(__name__)

DEFAULT_PASSWORD = "password"

ROLES: list[dict[str, Any]] = [
    {
        "name": "Owner",
        "slug": "owner",
        "description": "System owner with full access",
        "permissions": ["*"],
    },
    {
        "name": "Project Manager",
        "slug": "pm",
        "description": "Project management and team coordination",
        "permissions": [
            "view_all_tools",
            "manage_projects",
            "view_analytics",
            "manage_team",
            "assign_tasks",
        ],
    },
    {
        "name": "Backend Developer",
        "slug": "backend",
        "description": "Backend development tools and API management",
        "permissions": [
            "view_backend_tools",
            "manage_apis",
            "monitor_performance",
            "database_access",
            "deploy_code",
        ],
    },
    {
        "name": "Frontend Developer",
        "slug": "frontend",
        "description": "Frontend development tools and UI components",
        "permissions": [
            "view_frontend_tools",
            "edit_ui_components",
            "manage_assets",
            "preview_changes",
        ],
    },
    {
        "name": "Designer",
        "slug": "designer",
        "description": "Design and creative tools",
        "permissions": ["view_design_tools", "manage_assets", "create_designs", "edit_templates"],
    },
    {
        "name": "QA Engineer",
        "slug": "qa",
        "description": "Quality assurance and testing tools",
        "permissions": [
            "view_testing_tools",
            "run_tests",
            "create_reports",
            "manage_bugs",
            "access_staging",
        ],
    },
    {
        "name": "User",
        "slug": "user",
        "description": "Basic user access",
        "permissions": ["view_basic_tools"],
    },
]

CATEGORIES: list[dict[str, Any]] = [
    {
        "name": "Text Generation",
        "slug": "text-generation",
        "description": "AI tools for generating and manipulating text content",
        "icon": "📝",
        "color": "#3B82F6",
    },
    {
        "name": "Image Generation",
        "slug": "image-generation",
        "description": "AI tools for creating and editing images",
        "icon": "🎨",
        "color": "#EC4899",
    },
    {
        "name": "Code Generation",
        "slug": "code-generation",
        "description": "AI tools for code generation and programming assistance",
        "icon": "💻",
        "color": "#10B981",
    },
    {
        "name": "Data Analysis",
        "slug": "data-analysis",
        "description": "AI tools for data processing and analysis",
        "icon": "📊",
        "color": "#F59E0B",
    },
    {
        "name": "Audio Processing",
        "slug": "audio-processing",
        "description": "AI tools for audio generation and processing",
        "icon": "🎵",
        "color": "#8B5CF6",
    },
    {
        "name": "Video Processing",
        "slug": "video-processing",
        "description": "AI tools for video generation and editing",
        "icon": "🎬",
        "color": "#EF4444",
    },
    {
        "name": "Translation",
        "slug": "translation",
        "description": "AI tools for language translation",
        "icon": "🌍",
        "color": "#06B6D4",
    },
    {
        "name": "Productivity",
        "slug": "productivity",
        "description": "AI tools for productivity and automation",
        "icon": "⚡",
        "color": "#6366F1",
    },
]

TAGS: list[dict[str, Any]] = [
    {
        "name": "Machine Learning",
        "slug": "machine-learning",
        "description": "AI tools focused on machine learning algorithms and models",
        "color": "#FF6B6B",
        "icon": "🤖",
    },
    {
        "name": "Natural Language",
        "slug": "natural-language",
        "description": "Tools for processing and understanding human language",
        "color": "#4ECDC4",
        "icon": "💬",
    },
    {
        "name": "Computer Vision",
        "slug": "computer-vision",
        "description": "AI tools for image and video processing",
        "color": "#45B7D1",
        "icon": "👁️",
    },
    {
        "name": "Code Generation",
        "slug": "code-generation",
        "description": "Tools that help write and generate code",
        "color": "#96CEB4",
        "icon": "💻",
    },
    {
        "name": "Data Analysis",
        "slug": "data-analysis",
        "description": "Tools for analyzing and visualizing data",
        "color": "#FFEAA7",
        "icon": "📊",
    },
    {
        "name": "Audio Processing",
        "slug": "audio-processing",
        "description": "AI tools for audio and speech processing",
        "color": "#DDA0DD",
        "icon": "🎵",
    },
    {
        "name": "Productivity",
        "slug": "productivity",
        "description": "Tools that enhance productivity and workflow",
        "color": "#98D8C8",
        "icon": "⚡",
    },
    {
        "name": "Creative",
        "slug": "creative",
        "description": "Tools for creative tasks and artistic work",
        "color": "#F7DC6F",
        "icon": "🎨",
    },
    {
        "name": "Automation",
        "slug": "automation",
        "description": "Tools for automating repetitive tasks",
        "color": "#BB8FCE",
        "icon": "🔄",
    },
    {
        "name": "Research",
        "slug": "research",
        "description": "Tools for academic and scientific research",
        "color": "#85C1E2",
        "icon": "🔬",
    },
]

# role_slug replaces the role name the demo accounts were keyed on
USERS: list[dict[str, Any]] = [
    {"name": "Иван Иванов", "email": "ivan@admin.local", "role_slug": "owner"},
    {"name": "Елена Петрова", "email": "elena@frontend.local", "role_slug": "frontend"},
    {"name": "Петър Георгиев", "email": "petar@backend.local", "role_slug": "backend"},
]

# user_email identifies the creating user
TOOLS: list[dict[str, Any]] = [
    {
        "name": "TensorFlow",
        "slug": "tensorflow",
        "description": (
            "Open source machine learning framework developed by Google. Provides "
            "comprehensive ecosystem for building and deploying ML models."
        ),
        "category": "Machine Learning",
        "tool_type": "framework",
        "url": "https://tensorflow.org",
        "documentation_url": "https://tensorflow.org/guide",
        "github_url": "https://github.com/tensorflow/tensorflow",
        "user_email": "petar@backend.local",
        "author_name": "Google",
        "team": "AI Team",
        "tags": ["python", "machine-learning", "deep-learning", "neural-networks"],
        "use_case": (
            "Building and training neural networks for image recognition and natural "
            "language processing tasks."
        ),
        "pros": (
            "Comprehensive ecosystem, great documentation, production-ready deployment options."
        ),
        "cons": "Steep learning curve, complex API for beginners.",
        "rating": 5,
    },
    {
        "name": "OpenAI API",
        "slug": "openai-api",
        "description": (
            "Access to OpenAI's powerful language models including GPT-4, GPT-3.5, and "
            "DALL-E for text and image generation."
        ),
        "category": "AI Services",
        "tool_type": "api",
        "url": "https://openai.com/api",
        "documentation_url": "https://platform.openai.com/docs",
        "user_email": "ivan@admin.local",
        "author_name": "OpenAI",
        "team": "Innovation Team",
        "tags": ["api", "language-models", "text-generation", "ai-services"],
        "use_case": (
            "Integrating AI-powered text generation and conversation capabilities into "
            "our applications."
        ),
        "pros": "High-quality outputs, reliable service, comprehensive documentation.",
        "cons": "API costs can add up, rate limits apply.",
        "rating": 5,
    },
    {
        "name": "Figma",
        "slug": "figma",
        "description": (
            "Collaborative interface design tool with real-time collaboration, "
            "prototyping, and design systems."
        ),
        "category": "Design Tools",
        "tool_type": "application",
        "url": "https://figma.com",
        "documentation_url": "https://help.figma.com",
        "user_email": "ivan@admin.local",
        "author_name": "Figma",
        "team": "Design Team",
        "tags": ["design", "ui", "ux", "prototyping", "collaboration"],
        "use_case": (
            "Creating wireframes, prototypes, and design systems for our web and mobile "
            "applications."
        ),
        "pros": "Real-time collaboration, extensive plugin ecosystem, works in browser.",
        "cons": "Requires internet connection, some advanced features are paid.",
        "rating": 5,
    },
    {
        "name": "React Testing Library",
        "slug": "react-testing-library",
        "description": (
            "Simple and complete testing utilities that encourage good testing practices "
            "for React components."
        ),
        "category": "Testing",
        "tool_type": "library",
        "url": "https://testing-library.com/docs/react-testing-library/intro",
        "documentation_url": "https://testing-library.com/docs/react-testing-library/intro",
        "github_url": "https://github.com/testing-library/react-testing-library",
        "user_email": "elena@frontend.local",
        "author_name": "Kent C. Dodds",
        "team": "Frontend Team",
        "tags": ["testing", "react", "javascript", "frontend"],
        "use_case": (
            "Writing unit and integration tests for React components to ensure code quality."
        ),
        "pros": (
            "Encourages testing user interactions, simple API, works with all React "
            "testing frameworks."
        ),
        "cons": "Requires understanding of testing best practices.",
        "rating": 4,
    },
    {
        "name": "Laravel Sanctum",
        "slug": "laravel-sanctum",
        "description": (
            "Lightweight authentication system for SPAs, mobile applications, and simple APIs."
        ),
        "category": "Authentication",
        "tool_type": "library",
        "url": "https://laravel.com/docs/sanctum",
        "documentation_url": "https://laravel.com/docs/sanctum",
        "github_url": "https://github.com/laravel/sanctum",
        "user_email": "petar@backend.local",
        "author_name": "Laravel",
        "team": "Backend Team",
        "tags": ["php", "laravel", "authentication", "api", "security"],
        "use_case": "Implementing secure API authentication for our web applications.",
        "pros": (
            "Simple to use, integrates seamlessly with Laravel, supports multiple "
            "authentication methods."
        ),
        "cons": "Laravel-specific, may not be suitable for non-Laravel projects.",
        "rating": 4,
    },
    {
        "name": "Postman",
        "slug": "postman",
        "description": (
            "API development and testing tool that helps developers build, test, and "
            "document APIs more efficiently."
        ),
        "category": "API Development",
        "tool_type": "application",
        "url": "https://postman.com",
        "documentation_url": "https://learning.postman.com/docs/getting-started/introduction",
        "user_email": "petar@backend.local",
        "author_name": "Postman",
        "team": "Backend Team",
        "tags": ["api", "testing", "documentation", "development"],
        "use_case": (
            "Testing and documenting our API endpoints, automating API testing workflows."
        ),
        "pros": (
            "User-friendly interface, powerful automation features, great collaboration tools."
        ),
        "cons": "Free tier has limitations, can be resource-intensive.",
        "rating": 5,
    },
    {
        "name": "Docker",
        "slug": "docker",
        "description": "Platform for developing, shipping, and running applications in containers.",
        "category": "DevOps",
        "tool_type": "application",
        "url": "https://docker.com",
        "documentation_url": "https://docs.docker.com",
        "github_url": "https://github.com/docker/docker",
        "user_email": "petar@backend.local",
        "author_name": "Docker Inc.",
        "team": "DevOps Team",
        "tags": ["containers", "devops", "deployment", "virtualization"],
        "use_case": (
            "Containerizing our applications for consistent development and deployment "
            "environments."
        ),
        "pros": (
            "Ensures consistency across environments, easy scaling, comprehensive ecosystem."
        ),
        "cons": "Learning curve, resource overhead for small projects.",
        "rating": 5,
    },
    {
        "name": "Tailwind CSS",
        "slug": "tailwind-css",
        "description": "Utility-first CSS framework for rapidly building custom user interfaces.",
        "category": "Frontend Framework",
        "tool_type": "framework",
        "url": "https://tailwindcss.com",
        "documentation_url": "https://tailwindcss.com/docs",
        "github_url": "https://github.com/tailwindlabs/tailwindcss",
        "user_email": "elena@frontend.local",
        "author_name": "Tailwind Labs",
        "team": "Frontend Team",
        "tags": ["css", "frontend", "utility-classes", "responsive-design"],
        "use_case": (
            "Rapidly building responsive, modern user interfaces with consistent styling."
        ),
        "pros": "Fast development, consistent design system, responsive by default.",
        "cons": "Requires learning utility classes, can lead to verbose HTML.",
        "rating": 4,
    },
]


@dataclass(frozen=True)
class SeedSummary:
    """Number of rows inserted per table."""

    roles: int
    categories: int
    tags: int
    users: int
    tools: int


async def seed_database(
    session: AsyncSession,
    password: str = DEFAULT_PASSWORD,
    password_hash: str | None = None,
) -> SeedSummary:
    """
    Insert the seed rows that are missing and commit.

    Args:
        session: Write session
        password: Password given to the demo users
        password_hash: Precomputed hash for `password` (skips hashing)
    """
    roles = await _seed_by_key(session, Role, "slug", ROLES)
    categories = await _seed_by_key(session, Category, "slug", CATEGORIES)
    tags = await _seed_by_key(session, Tag, "slug", TAGS)
    await session.flush()

    result = await session.execute(select(Role))
    role_ids = {role.slug: role.id for role in result.scalars()}

    hashed = password_hash or hash_password(password)
    users = await _seed_by_key(
        session,
        User,
        "email",
        [
            {
                "name": row["name"],
                "email": row["email"],
                "password": hashed,
                "role_id": role_ids.get(row["role_slug"]),
                "is_active": True,
            }
            for row in USERS
        ],
    )
    await session.flush()

    result = await session.execute(select(User))
    user_ids = {user.email: user.id for user in result.scalars()}

    tools = await _seed_by_key(
        session,
        AiTool,
        "name",
        [
            {
                **{key: value for key, value in row.items() if key != "user_email"},
                "user_id": user_ids[row["user_email"]],
                "is_active": True,
                "status": "active",
                "version": "1.0.0",
            }
            for row in TOOLS
        ],
    )

    await session.commit()

    summary = SeedSummary(
        roles=roles, categories=categories, tags=tags, users=users, tools=tools
    )
    logger.info(
        "database_seeded",
        roles=summary.roles,
        categories=summary.categories,
        tags=summary.tags,
        users=summary.users,
        tools=summary.tools,
    )
    return summary


async def _seed_by_key(
    session: AsyncSession, model: Any, key: str, rows: list[dict[str, Any]]
) -> int:
    column = getattr(model, key)
    result = await session.execute(select(column))
    existing = set(result.scalars())

    inserted = 0
    for row in rows:
        if row[key] in existing:
            continue
        session.add(model(**row))
        inserted += 1
    return inserted
