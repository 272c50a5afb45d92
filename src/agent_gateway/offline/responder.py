"""Offline responder used when no provider call should or can be made."""

import random
import re
from dataclasses import replace
from pathlib import PurePosixPath
from typing import Optional, Protocol, Tuple

from agent_gateway.telemetry import get_logger

from .classifier import detect_agent_role, detect_request_kind
from .templates import (
    EXTENSION_LANGUAGES,
    KIND_DEFAULT_FILES,
    PLACEHOLDER_SNIPPETS,
    POOLS,
    CodeFile,
    Template,
)

logger = get_logger(__name__)

PREVIEW_LENGTH = 100
TEMPLATE_CHOICES = 3

FILENAME_PATTERN = re.compile(
    r"(?<![\w.])([\w-]+(?:/[\w.-]+)*\.(?:" + "|".join(ext[1:] for ext in EXTENSION_LANGUAGES) + r"))\b",
    re.IGNORECASE,
)
FRAMEWORK_NAMES = {"node.js", "vue.js", "next.js", "react.js", "nuxt.js", "express.js", "three.js"}

DEVELOPER_TITLES = {
    "developer-frontend": "Frontend Developer",
    "developer-backend": "Backend Developer",
    "developer-database": "Database Developer",
    "developer-mobile": "Mobile Developer",
    "developer-generic": "Developer",
}

# request kind -> developer pool, checked before the specialization fallback
KIND_DEVELOPER_POOLS = {
    "code-javascript": "code-javascript",
    "code-python": "code-python",
    "code-frontend-framework": "code-frontend",
    "code-sql": "code-sql",
}

SPECIALIZATION_POOLS = {
    "Frontend Developer": "code-frontend",
    "Backend Developer": "code-python",
    "Database Developer": "code-sql",
}


class Responder(Protocol):
    """Anything that can answer a prompt without a provider."""

    def respond(self, prompt: str) -> str:
        ...


def prompt_preview(prompt: str) -> str:
    if len(prompt) > PREVIEW_LENGTH:
        return "..." + prompt[-PREVIEW_LENGTH:]
    return prompt


def requested_filename(prompt: str) -> Optional[str]:
    """First file name mentioned in the prompt, ignoring framework names."""
    for match in FILENAME_PATTERN.finditer(prompt):
        name = match.group(1)
        if name.lower() not in FRAMEWORK_NAMES:
            return name
    return None


def developer_pool(kind: str, title: str) -> str:
    if kind in KIND_DEVELOPER_POOLS:
        return KIND_DEVELOPER_POOLS[kind]
    return SPECIALIZATION_POOLS.get(title, "code-generic")


def select_pool(role: str, kind: str) -> Tuple[str, str]:
    """Map a detected role and request kind onto a template pool and title."""
    if role == "lead-developer":
        return ("architecture" if kind == "architecture" else "lead"), "Lead Developer"
    if role in DEVELOPER_TITLES:
        title = DEVELOPER_TITLES[role]
        return developer_pool(kind, title), title
    if role == "tester":
        return "tester", "Tester"
    if role == "designer":
        return ("design-mockup" if kind in ("design-ui-ux", "code-web") else "design-notes"), "Designer"
    if role == "sales-agent":
        return "sales", "Sales Agent"
    if role == "devops-engineer":
        return ("devops-config" if kind.startswith("config-") else "devops-notes"), "DevOps"
    if role == "security-expert":
        return "security", "Security Expert"
    if role == "documentation-writer":
        return ("docs-api" if kind == "documentation" else "docs-notes"), "Documentation Writer"

    # Role unknown: fall back on the request kind alone
    if kind.startswith("code-"):
        return developer_pool(kind, "Developer"), "Developer"
    if kind.startswith("config-"):
        return "devops-config", "DevOps"
    fallbacks = {
        "testing": ("tester", "Tester"),
        "architecture": ("architecture", "Lead Developer"),
        "design-ui-ux": ("design-mockup", "Designer"),
        "sales-marketing": ("sales", "Sales Agent"),
    }
    return fallbacks.get(kind, ("generic", ""))


def _retarget(code_file: CodeFile, filename: str) -> CodeFile:
    language = EXTENSION_LANGUAGES.get(PurePosixPath(filename).suffix.lower())
    if language is None or language == code_file.language:
        return replace(code_file, filename=filename)
    code = PLACEHOLDER_SNIPPETS.get(language, code_file.code)
    return CodeFile(filename=filename, language=language, code=code)


def render(template: Template, preview: str, title: str, filename: Optional[str] = None) -> str:
    files = list(template.files)
    if filename and files:
        files[0] = _retarget(files[0], filename)

    lines = [template.intro.format(preview=preview, title=title)]
    for code_file in files:
        lines.append(code_file.filename)
        lines.append(f"```{code_file.language}")
        lines.append(code_file.code)
        lines.append("```")
    if template.outro:
        lines.append(template.outro.format(preview=preview, title=title))
    return "\n".join(lines)


class OfflineResponder:
    """
    Produces canned, role-aware answers without calling a provider.

    Args:
        rng: Random source used to pick a template; pass a seeded
            ``random.Random`` for reproducible output.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def respond(self, prompt: str) -> str:
        role = detect_agent_role(prompt)
        kind = detect_request_kind(prompt)
        pool_name, title = select_pool(role, kind)
        pool = POOLS[pool_name]
        template = pool[self._rng.randrange(TEMPLATE_CHOICES) % len(pool)]

        filename = requested_filename(prompt)
        if filename is None and pool_name == "code-generic":
            filename = KIND_DEFAULT_FILES.get(kind)
        logger.debug("offline_response", role=role, kind=kind, pool=pool_name, filename=filename)
        return render(template, prompt_preview(prompt), title, filename)
