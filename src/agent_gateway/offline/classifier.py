"""
Keyword tables that classify a prompt into an agent role and a request kind.

Both tables are ordered; the first rule whose keywords appear in the
lower-cased prompt wins. Matching is plain substring search, so short
keywords such as "ui" or "api" also hit inside longer words.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

UNKNOWN_ROLE = "unknown"
GENERIC_KIND = "generic"

CREATE_VERBS: Tuple[str, ...] = (
    "create",
    "write",
    "generate",
    "implement",
    "develop",
    "build",
    "make a",
)


@dataclass(frozen=True)
class KeywordRule:
    """Matches when any keyword is present and, if given, any context word too."""

    label: str
    keywords: Tuple[str, ...]
    context: Tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if self.context and not any(word in text for word in self.context):
            return False
        return any(keyword in text for keyword in self.keywords)


ROLE_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule(
        "lead-developer",
        ("lead developer", "architecture", "decisions", "requirements", "technical decision"),
    ),
    KeywordRule("developer-frontend", ("frontend", "ui", "user interface"), context=("developer",)),
    KeywordRule("developer-backend", ("backend", "api", "server-side"), context=("developer",)),
    KeywordRule("developer-database", ("database", "sql", "nosql"), context=("developer",)),
    KeywordRule("developer-mobile", ("mobile", "ios", "android"), context=("developer",)),
    KeywordRule("developer-generic", ("developer",)),
    KeywordRule("tester", ("tester", "test", "verify", "bugs", "quality assurance")),
    KeywordRule("designer", ("designer", "design", "ui/ux", "mockup", "wireframe")),
    KeywordRule("sales-agent", ("sales", "marketing", "pitch")),
    KeywordRule(
        "devops-engineer",
        ("devops", "ci/cd", "deployment", "kubernetes", "docker", "infrastructure"),
    ),
    KeywordRule("security-expert", ("security", "vulnerability", "pentest")),
    KeywordRule("documentation-writer", ("documentation", "docs", "manual", "instructions")),
)

KIND_RULES: Tuple[KeywordRule, ...] = (
    KeywordRule("code-javascript", ("javascript", ".js"), context=CREATE_VERBS),
    KeywordRule("code-python", ("python", ".py"), context=CREATE_VERBS),
    KeywordRule("code-java", ("java",), context=CREATE_VERBS),
    KeywordRule("code-csharp", ("c#", "csharp", "c-sharp"), context=CREATE_VERBS),
    KeywordRule("code-web", ("html", "css", "webpage", "web page"), context=CREATE_VERBS),
    KeywordRule(
        "code-frontend-framework",
        ("react", "vue", "angular", "component"),
        context=CREATE_VERBS,
    ),
    KeywordRule("config-docker", ("dockerfile",), context=CREATE_VERBS),
    KeywordRule("config-kubernetes", ("kubernetes", "k8s"), context=CREATE_VERBS),
    KeywordRule("config-cicd", ("ci/cd", "pipeline"), context=CREATE_VERBS),
    KeywordRule("documentation", ("api documentation", "user manual", "user guide"), context=CREATE_VERBS),
    KeywordRule("code-generic", CREATE_VERBS),
    KeywordRule("design-ui-ux", ("design", "mockup", "wireframe", "user interface", "ux")),
    KeywordRule("sales-marketing", ("sales copy", "marketing material", "pitch deck", "advertisement")),
    KeywordRule("architecture", ("architecture", "system design", "structure")),
    KeywordRule("testing", ("test", "verify", "validate", "verification")),
    KeywordRule("review", ("review", "assess", "evaluate")),
    KeywordRule("security-analysis", ("security scan", "security analysis", "security measures")),
)


def classify(prompt: str, rules: Sequence[KeywordRule], default: str) -> str:
    """Return the label of the first matching rule."""
    text = prompt.lower()
    for rule in rules:
        if rule.matches(text):
            return rule.label
    return default


def detect_agent_role(prompt: str) -> str:
    return classify(prompt, ROLE_RULES, UNKNOWN_ROLE)


def detect_request_kind(prompt: str) -> str:
    return classify(prompt, KIND_RULES, GENERIC_KIND)
