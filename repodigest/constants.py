"""Static tables shared by the classifier, pattern resolver and formatters."""

from __future__ import annotations

from typing import Dict, FrozenSet, List, Tuple


# =============================================================================
# SIZE LIMITS
# =============================================================================

class SizeLimits:
    """Default size thresholds."""
    DEFAULT_MAX_SIZE = 10 * 1024 * 1024   # 10 MiB
    CHUNK_SIZE = 1024                     # bytes sniffed for NUL detection
    TOP_FILES = 10


# =============================================================================
# BINARY DETECTION
# =============================================================================

BINARY_EXTENSIONS: FrozenSet[str] = frozenset({
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tiff", ".webp", ".ico", ".svg",
    ".psd", ".ai", ".sketch", ".fig", ".xcf", ".raw", ".cr2", ".nef",
    # Video
    ".mp4", ".mkv", ".mov", ".avi", ".wmv", ".flv", ".webm", ".m4v", ".mpg",
    # Audio
    ".mp3", ".wav", ".ogg", ".flac", ".aac", ".m4a", ".wma", ".opus",
    # Archives
    ".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".tgz", ".deb", ".rpm",
    # Executables
    ".exe", ".dll", ".so", ".dylib", ".app", ".dmg", ".pkg", ".msi",
    # Documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # Fonts
    ".ttf", ".otf", ".woff", ".woff2", ".eot",
    # Databases
    ".db", ".sqlite", ".sqlite3", ".mdb",
    # Other
    ".bin", ".dat", ".iso", ".img",
})


# =============================================================================
# LANGUAGES
# =============================================================================

# Order matters: the first entry listing a basename or extension wins.
LANGUAGE_EXTENSIONS: Dict[str, Tuple[str, ...]] = {
    "JavaScript": (".js", ".jsx", ".mjs", ".cjs"),
    "TypeScript": (".ts", ".tsx", ".d.ts"),
    "Python": (".py", ".pyw", ".pyx", ".pyi"),
    "Java": (".java", ".class", ".jar"),
    "C++": (".cpp", ".cxx", ".cc", ".c++", ".hpp", ".hxx", ".h++"),
    "C": (".c", ".h"),
    "C#": (".cs", ".csx"),
    "Go": (".go",),
    "Rust": (".rs",),
    "PHP": (".php", ".phtml", ".php3", ".php4", ".php5"),
    "Ruby": (".rb", ".rbw", ".rake", ".gemspec"),
    "Swift": (".swift",),
    "Kotlin": (".kt", ".kts"),
    "Scala": (".scala", ".sc"),
    "HTML": (".html", ".htm", ".xhtml"),
    "CSS": (".css", ".scss", ".sass", ".less"),
    "SQL": (".sql", ".mysql", ".pgsql"),
    "Shell": (".sh", ".bash", ".zsh", ".fish"),
    "PowerShell": (".ps1", ".psm1", ".psd1"),
    "Batch": (".bat", ".cmd"),
    "Markdown": (".md", ".markdown", ".mdown"),
    "JSON": (".json", ".jsonc", ".json5"),
    "YAML": (".yml", ".yaml"),
    "XML": (".xml", ".xsd", ".xsl"),
    "Dockerfile": ("Dockerfile", ".dockerfile"),
    "Makefile": ("Makefile", "makefile", ".mk"),
    "R": (".r", ".R"),
    "Dart": (".dart",),
    "Lua": (".lua",),
    "Perl": (".pl", ".pm"),
    "Haskell": (".hs", ".lhs"),
    "Clojure": (".clj", ".cljs", ".cljc"),
    "Elixir": (".ex", ".exs"),
    "Erlang": (".erl", ".hrl"),
    "F#": (".fs", ".fsx", ".fsi"),
    "OCaml": (".ml", ".mli"),
    "Vim": (".vim", ".vimrc"),
    "LaTeX": (".tex", ".cls", ".sty"),
    "TOML": (".toml",),
    "INI": (".ini", ".cfg", ".conf"),
    "Properties": (".properties",),
    "Groovy": (".groovy", ".gvy"),
    "Assembly": (".asm", ".s"),
    "VHDL": (".vhd", ".vhdl"),
    "Verilog": (".v", ".vh"),
    "Solidity": (".sol",),
    "GraphQL": (".graphql", ".gql"),
    "Protobuf": (".proto",),
    "Thrift": (".thrift",),
}

# Fallback for extensionless names (case-insensitive substring of the basename).
EXTENSIONLESS_LANGUAGES: Tuple[Tuple[str, str], ...] = (
    ("dockerfile", "Dockerfile"),
    ("makefile", "Makefile"),
    ("rakefile", "Ruby"),
    ("gemfile", "Ruby"),
)

# Include globs added by ``--language``.
LANGUAGE_GLOBS: Dict[str, Tuple[str, ...]] = {
    "javascript": ("**/*.js", "**/*.jsx", "**/*.mjs", "**/*.cjs"),
    "typescript": ("**/*.ts", "**/*.tsx", "**/*.d.ts"),
    "python": ("**/*.py", "**/*.pyw", "**/*.pyx"),
    "java": ("**/*.java",),
    "cpp": ("**/*.cpp", "**/*.cxx", "**/*.cc", "**/*.hpp", "**/*.hxx"),
    "c": ("**/*.c", "**/*.h"),
    "csharp": ("**/*.cs",),
    "go": ("**/*.go",),
    "rust": ("**/*.rs",),
    "php": ("**/*.php",),
    "ruby": ("**/*.rb",),
    "swift": ("**/*.swift",),
    "kotlin": ("**/*.kt",),
    "scala": ("**/*.scala",),
    "html": ("**/*.html", "**/*.htm"),
    "css": ("**/*.css", "**/*.scss", "**/*.sass", "**/*.less"),
    "sql": ("**/*.sql",),
    "shell": ("**/*.sh", "**/*.bash", "**/*.zsh"),
    "markdown": ("**/*.md", "**/*.markdown"),
    "json": ("**/*.json",),
    "yaml": ("**/*.yml", "**/*.yaml"),
    "xml": ("**/*.xml",),
}

# Code-fence hints for the Markdown formatter.
MARKDOWN_FENCES: Dict[str, str] = {
    "JavaScript": "javascript", "TypeScript": "typescript", "Python": "python",
    "Java": "java", "C++": "cpp", "C": "c", "C#": "csharp", "Go": "go",
    "Rust": "rust", "PHP": "php", "Ruby": "ruby", "Swift": "swift",
    "Kotlin": "kotlin", "Scala": "scala", "HTML": "html", "CSS": "css",
    "SQL": "sql", "Shell": "bash", "PowerShell": "powershell", "Batch": "batch",
    "Markdown": "markdown", "JSON": "json", "YAML": "yaml", "XML": "xml",
}


# =============================================================================
# IGNORE RULES
# =============================================================================

# Gitignore-style deny list applied to every walk.
DEFAULT_IGNORE_PATTERNS: Tuple[str, ...] = (
    # Version control
    ".git/", ".svn/", ".hg/", ".bzr/",
    # Dependencies
    "node_modules/", "bower_components/", "vendor/", "packages/",
    ".pnp/", ".pnp.js", ".yarn/", ".npm/",
    # Build outputs
    "dist/", "build/", "out/", "lib/", "target/", "bin/",
    ".next/", ".nuxt/", ".vuepress/dist/", ".docusaurus/",
    # Caches
    ".cache/", ".turbo/", ".nx/", ".parcel-cache/",
    ".vite/", ".rollup.cache/", ".esbuild/",
    "__pycache__/", ".pytest_cache/", ".mypy_cache/", ".ruff_cache/", ".tox/", ".nox/",
    # Virtual environments
    ".venv/", "venv/",
    # IDE and editors
    ".vscode/", ".idea/", "*.sublime-*", ".history/",
    # OS files
    ".DS_Store", "Thumbs.db", "desktop.ini",
    # Logs and temp files
    "*.log", "logs/", "*.tmp", "*.temp", "*.swp", "*.swo",
    # Environment and secrets
    ".env*", "*.key", "*.pem", "*.crt", "*.cert",
    # Test coverage
    "coverage/", ".nyc_output/", ".coverage", "htmlcov/",
    # Language specific
    "*.pyc", "*.pyo",
    "*.class", "*.jar", "*.war",
    "*.o", "*.obj", "*.exe", "*.dll", "*.so",
    # Package manager files
    "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    "Pipfile.lock", "poetry.lock", "Gemfile.lock",
    # Documentation builds
    "_site/", "site/", "docs/_build/",
    # Mobile development
    ".android/", ".ios/", "Pods/",
    # Game development
    "Library/", "Temp/", "Obj/", "Builds/",
    # Archives and documents
    "*.zip", "*.tar.gz", "*.rar", "*.7z",
    "*.pdf", "*.doc", "*.docx", "*.xls", "*.xlsx",
)

# Read from the traversal root only, concatenated in this order.
IGNORE_FILES: Tuple[str, ...] = (
    ".gitignore",
    ".npmignore",
    ".dockerignore",
    ".eslintignore",
    ".prettierignore",
    ".repodigestignore",
)


# =============================================================================
# OUTPUT
# =============================================================================

class Separators:
    """Rules used by the text formatter."""
    MAIN = "=" * 80
    FILE = "-" * 40
    SECTION = "~" * 60


OUTPUT_FORMATS: List[str] = ["text", "json", "markdown"]

DEFAULT_OUTPUT_NAMES: Dict[str, str] = {
    "text": "digest.txt",
    "json": "digest.json",
    "markdown": "digest.md",
}

# Tree display glyphs
GLYPH_CHILD = "├── "
GLYPH_LAST = "└── "
GLYPH_PIPE = "│   "
GLYPH_SPACE = "    "
