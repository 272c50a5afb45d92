"""
Canned offline responses, grouped into small pools.

Intro and outro lines are ``str.format`` templates receiving ``preview`` and
``title``. Code files are rendered as a filename line directly followed by a
fenced block; downstream code extraction depends on that layout.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


@dataclass(frozen=True)
class CodeFile:
    filename: str
    language: str
    code: str


@dataclass(frozen=True)
class Template:
    intro: str
    files: Tuple[CodeFile, ...] = ()
    outro: str = ""


EXTENSION_LANGUAGES: Dict[str, str] = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "jsx",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".java": "java",
    ".cs": "csharp",
    ".html": "html",
    ".css": "css",
    ".sql": "sql",
    ".md": "markdown",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".sh": "bash",
    ".go": "go",
    ".rb": "ruby",
    ".vue": "html",
}

# Default file for request kinds that only have the generic developer pool
KIND_DEFAULT_FILES: Dict[str, str] = {
    "code-java": "Main.java",
    "code-csharp": "Program.cs",
    "code-web": "index.html",
}

# Used when a requested filename's language differs from the template's
PLACEHOLDER_SNIPPETS: Dict[str, str] = {
    "python": 'def main():\n    print("Hello from the offline generator")\n\n\nif __name__ == "__main__":\n    main()',
    "javascript": "function main() {\n  console.log('Hello from the offline generator');\n}\n\nmain();",
    "typescript": "export function main(): void {\n  console.log('Hello from the offline generator');\n}",
    "java": 'public class Main {\n    public static void main(String[] args) {\n        System.out.println("Hello from the offline generator");\n    }\n}',
    "csharp": 'class Program {\n    static void Main() {\n        System.Console.WriteLine("Hello from the offline generator");\n    }\n}',
    "html": "<!DOCTYPE html>\n<html>\n  <body>\n    <h1>Offline preview</h1>\n  </body>\n</html>",
    "css": "body { font-family: sans-serif; margin: 2rem; }",
    "sql": "SELECT 1;",
    "go": 'package main\n\nimport "fmt"\n\nfunc main() {\n\tfmt.Println("Hello from the offline generator")\n}',
    "bash": '#!/usr/bin/env bash\necho "Hello from the offline generator"',
}


POOLS: Dict[str, Tuple[Template, ...]] = {
    "generic": (
        Template('[OFFLINE MODE] Generic answer for: "{preview}". The agent role could not be detected.'),
        Template('[OFFLINE MODE] This is a general demo answer. You asked: "{preview}".'),
        Template(
            '[OFFLINE MODE] Simulated answer to your question about "{preview}". '
            "Disable offline mode for real answers."
        ),
    ),
    "architecture": (
        Template(
            '[OFFLINE MODE - {title}] After analysing the requirements for "{preview}", '
            "I propose the following architecture:",
            files=(
                CodeFile(
                    "architecture_document.md",
                    "markdown",
                    "## System architecture\n"
                    "1.  **Frontend**: React, Redux\n"
                    "2.  **Backend**: Node.js/Express, MongoDB\n"
                    "3.  **Deployment**: Docker, CI/CD with GitHub Actions",
                ),
            ),
            outro="This architecture keeps the system scalable and maintainable.",
        ),
        Template(
            '[OFFLINE MODE - {title}] For the project "{preview}" I recommend:',
            files=(
                CodeFile(
                    "config.yaml",
                    "yaml",
                    "# Architecture decisions\n"
                    "microservices: true\n"
                    "eventDriven: true\n"
                    "databaseStrategy:\n"
                    "  transactional: PostgreSQL\n"
                    "  search: Elasticsearch\n"
                    "stack:\n"
                    "  frontend: Vue.js\n"
                    "  services: [Node.js, Python]",
                ),
            ),
            outro="This gives a robust, scalable solution.",
        ),
    ),
    "lead": (
        Template(
            '[OFFLINE MODE - {title}] Technical decisions for "{preview}":',
            files=(
                CodeFile(
                    "tech_specs.txt",
                    "",
                    "- Modular architecture\n"
                    "- RESTful API (Node.js/Express)\n"
                    "- PostgreSQL database\n"
                    "- JWT authentication\n"
                    "- Frontend: React + TypeScript",
                ),
            ),
        ),
    ),
    "code-javascript": (
        Template(
            '[OFFLINE MODE - {title}] I wrote the JavaScript function for "{preview}":',
            files=(
                CodeFile(
                    "utils.js",
                    "javascript",
                    "function exampleJsFunction(param) {\n"
                    "  console.log('Hello from JavaScript!', param);\n"
                    "  return param * 2;\n"
                    "}",
                ),
            ),
            outro="This is a basic example.",
        ),
        Template(
            '[OFFLINE MODE - {title}] I wrote this JavaScript code for "{preview}":',
            files=(
                CodeFile(
                    "dataProcessor.js",
                    "javascript",
                    "const processData = (data) => data.map(item => ({ ...item, processed: true }));",
                ),
            ),
            outro="This function marks every item as processed.",
        ),
    ),
    "code-python": (
        Template(
            '[OFFLINE MODE - {title}] Here is the Python code for "{preview}":',
            files=(
                CodeFile(
                    "main.py",
                    "python",
                    "def example_python_function(param):\n"
                    '    print(f"Hello from Python! {param}")\n'
                    "    return param * 2",
                ),
            ),
            outro="A basic Python function.",
        ),
        Template(
            '[OFFLINE MODE - {title}] I wrote this Python code for "{preview}":',
            files=(
                CodeFile(
                    "api_handler.py",
                    "python",
                    "class APIHandler:\n"
                    "    def __init__(self, endpoint):\n"
                    "        self.endpoint = endpoint\n"
                    "\n"
                    "    def fetch_data(self):\n"
                    '        return {"data": "sample data from " + self.endpoint}',
                ),
            ),
            outro="An API handler class.",
        ),
    ),
    "code-frontend": (
        Template(
            '[OFFLINE MODE - {title}] I built the following React component for "{preview}":',
            files=(
                CodeFile(
                    "ButtonComponent.jsx",
                    "jsx",
                    "import React from 'react';\n"
                    "\n"
                    "function ButtonComponent({ label, onClick }) {\n"
                    "  return (\n"
                    "    <button onClick={onClick} style={{ padding: '10px', margin: '5px' }}>\n"
                    "      {label}\n"
                    "    </button>\n"
                    "  );\n"
                    "}\n"
                    "\n"
                    "export default ButtonComponent;",
                ),
            ),
            outro="A simple reusable button.",
        ),
        Template(
            '[OFFLINE MODE - {title}] For "{preview}" I wrote this Vue component:',
            files=(
                CodeFile(
                    "UserCard.vue",
                    "html",
                    "<template>\n"
                    '  <div class="user-card">\n'
                    "    <h3>{{ user.name }}</h3>\n"
                    "    <p>Email: {{ user.email }}</p>\n"
                    "  </div>\n"
                    "</template>\n"
                    "<script>\n"
                    "export default { props: { user: Object } }\n"
                    "</script>\n"
                    "<style scoped>.user-card { border: 1px solid #ccc; padding: 1rem; }</style>",
                ),
            ),
            outro="A basic user card component.",
        ),
    ),
    "code-sql": (
        Template(
            '[OFFLINE MODE - {title}] I wrote the following SQL query for "{preview}":',
            files=(
                CodeFile(
                    "query.sql",
                    "sql",
                    "SELECT id, name, email\nFROM users\nWHERE age > 30\nORDER BY name ASC;",
                ),
            ),
            outro="This fetches the matching users.",
        ),
        Template(
            '[OFFLINE MODE - {title}] For "{preview}" I designed this SQL schema:',
            files=(
                CodeFile(
                    "schema.sql",
                    "sql",
                    "CREATE TABLE IF NOT EXISTS products (\n"
                    "    product_id SERIAL PRIMARY KEY,\n"
                    "    product_name VARCHAR(255) NOT NULL,\n"
                    "    price DECIMAL(10, 2) NOT NULL\n"
                    ");",
                ),
            ),
            outro="A basic products table.",
        ),
    ),
    "code-generic": (
        Template(
            '[OFFLINE MODE - {title}] I wrote the code for "{preview}". Here is a fragment:',
            files=(
                CodeFile(
                    "placeholder_code.js",
                    "javascript",
                    "// placeholder_code.js\nfunction placeholder() {\n  return true;\n}",
                ),
            ),
            outro="Disable offline mode for real code.",
        ),
    ),
    "tester": (
        Template(
            '[OFFLINE MODE - Tester] I tested the code for "{preview}". Results:',
            files=(
                CodeFile(
                    "test_report.md",
                    "markdown",
                    "- Unit tests: 15/15 passed\n"
                    "- Integration tests: 8/10 passed (2 minor bugs found)\n"
                    "- Performance test: within acceptable limits\n"
                    "Bugs reported: #BUG-123, #BUG-124.",
                ),
            ),
            outro="Disable offline mode for real test results.",
        ),
        Template(
            '[OFFLINE MODE - Tester] Test report for "{preview}":',
            files=(
                CodeFile(
                    "functional_tests.txt",
                    "",
                    "- Functional tests: all main features work as expected.\n"
                    "- UI tests: no visual regressions found.\n"
                    "Conclusion: code approved.",
                ),
            ),
            outro="Real reports are available in online mode.",
        ),
    ),
    "design-mockup": (
        Template(
            '[OFFLINE MODE - Designer] Here is an HTML/CSS mockup for "{preview}":',
            files=(
                CodeFile(
                    "design_mockup.html",
                    "html",
                    '<div class="container">\n'
                    "  <h1>Mockup</h1>\n"
                    '  <button class="cta-button">Call to Action</button>\n'
                    "</div>",
                ),
                CodeFile(
                    "style.css",
                    "css",
                    ".container { padding: 20px; border: 1px solid #ccc; }\n"
                    ".cta-button { background-color: #007bff; color: white; padding: 10px; }",
                ),
            ),
            outro="This is a concept. The full design is available in online mode.",
        ),
    ),
    "design-notes": (
        Template(
            '[OFFLINE MODE - Designer] I thought about the design for "{preview}". '
            "Focus on usability. Details in online mode."
        ),
    ),
    "sales": (
        Template(
            '[OFFLINE MODE - Sales Agent] Sales copy for "{preview}":',
            files=(
                CodeFile(
                    "sales_copy.txt",
                    "",
                    "Discover the revolutionary solution! Boost your productivity.",
                ),
            ),
            outro="This is a draft. More persuasive copy in online mode.",
        ),
    ),
    "devops-config": (
        Template(
            '[OFFLINE MODE - DevOps] Here is a basic Dockerfile for "{preview}":',
            files=(
                CodeFile(
                    "Dockerfile",
                    "dockerfile",
                    "FROM node:18-alpine\n"
                    "WORKDIR /app\n"
                    "COPY package*.json ./\n"
                    "RUN npm install\n"
                    "COPY . .\n"
                    "EXPOSE 3000\n"
                    'CMD ["npm", "start"]',
                ),
            ),
            outro="This is a starting point. Full configuration in online mode.",
        ),
    ),
    "devops-notes": (
        Template(
            '[OFFLINE MODE - DevOps] I planned the infrastructure and deployment strategy '
            'for "{preview}". Details in online mode.'
        ),
    ),
    "security": (
        Template(
            '[OFFLINE MODE - Security Expert] Security analysis for "{preview}":',
            files=(
                CodeFile(
                    "security_report.md",
                    "markdown",
                    "- Potential risks: SQL injection, XSS.\n"
                    "- Recommended measures: input validation, output encoding.",
                ),
            ),
            outro="Detailed report in online mode.",
        ),
    ),
    "docs-api": (
        Template(
            '[OFFLINE MODE - Documentation Writer] API documentation (draft) for "{preview}":',
            files=(
                CodeFile(
                    "api_docs.md",
                    "markdown",
                    "## Endpoint: /api/users\n- **GET /api/users**: returns a list of all users.",
                ),
            ),
            outro="Full OpenAPI/Swagger specification in online mode.",
        ),
    ),
    "docs-notes": (
        Template(
            '[OFFLINE MODE - Documentation Writer] I started writing the documentation for '
            '"{preview}". Details in online mode.'
        ),
    ),
}
