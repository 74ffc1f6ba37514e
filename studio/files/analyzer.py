# FILE: studio/files/analyzer.py
"""
Deterministic analysis of uploaded files.

Key functions:
- determine_file_type(): text / code / image / document / unknown
- analyze_code(): per-line regex metrics (functions, classes, imports, comments)
- generate_summary(): one-sentence description of text content
- extract_document_text(): PDF (pypdf), DOCX (python-docx), plain text
- analyze_file(): the analysis dict stored on the File row

Analysis is heuristic only: no file is ever executed or parsed as code.
"""

import io
import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from docx import Document
from pypdf import PdfReader

logger = logging.getLogger(__name__)

CODE_EXTENSIONS = {
    ".js", ".jsx", ".ts", ".tsx", ".py", ".java", ".cpp", ".c", ".h",
    ".css", ".html", ".php", ".rb", ".go", ".rs", ".swift",
}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx", ".txt", ".md", ".rtf"}
PLAIN_DOCUMENT_EXTENSIONS = {".txt", ".md", ".rtf"}

LANGUAGE_MAP = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".py": "python",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".css": "css",
    ".html": "html",
    ".php": "php",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".swift": "swift",
}

_FUNCTION_LINE = re.compile(r"function\s+\w+|const\s+\w+\s*=\s*\(|def\s+\w+")
_CLASS_LINE = re.compile(r"class\s+\w+|interface\s+\w+")
_IMPORT_LINE = re.compile(r"^import\s+|^from\s+.*import|^#include")
_COMMENT_LINE = re.compile(r"^//|^/\*|^\*|^#|^<!--")

_SUMMARY_DEFS = re.compile(r"function\s+\w+|def\s+\w+|class\s+\w+")
_SUMMARY_IMPORTS = re.compile(r"import\s+.*|#include\s+.*|require\s*\(")
_HEADING = re.compile(r"^#+\s+.*", re.MULTILINE)

_CODE_INDICATORS = [
    re.compile(r"function\s+\w+"),
    re.compile(r"class\s+\w+"),
    re.compile(r"def\s+\w+"),
    re.compile(r"import\s+"),
    re.compile(r"require\s*\("),
    re.compile(r"#include\s+"),
    re.compile(r"\{[\s\S]*\}"),
    re.compile(r"for\s*\(|while\s*\(|if\s*\("),
]


def _ext(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def determine_file_type(mime_type: str, filename: str) -> str:
    mime_type = mime_type or ""
    if mime_type.startswith("text/"):
        return "text"
    if mime_type.startswith("image/"):
        return "image"

    ext = _ext(filename)
    if ext in CODE_EXTENSIONS:
        return "code"
    if ext in DOCUMENT_EXTENSIONS:
        return "document"
    return "unknown"


def detect_language(filename: str) -> str:
    return LANGUAGE_MAP.get(_ext(filename), "unknown")


def analyze_code(content: str) -> Dict[str, int]:
    metrics = {"functions": 0, "classes": 0, "imports": 0, "comments": 0}
    for line in content.split("\n"):
        trimmed = line.strip()
        if _FUNCTION_LINE.search(trimmed):
            metrics["functions"] += 1
        if _CLASS_LINE.search(trimmed):
            metrics["classes"] += 1
        if _IMPORT_LINE.search(trimmed):
            metrics["imports"] += 1
        if _COMMENT_LINE.search(trimmed):
            metrics["comments"] += 1
    return metrics


def assess_complexity(metrics: Optional[Dict[str, int]], line_count: int = 0) -> str:
    if not metrics:
        return "low"
    total = metrics["functions"] + metrics["classes"] + line_count // 50
    if total > 20:
        return "high"
    if total > 10:
        return "medium"
    return "low"


def is_code_content(content: str) -> bool:
    return any(p.search(content) for p in _CODE_INDICATORS)


def generate_summary(content: str) -> str:
    lines = [line for line in content.split("\n") if line.strip()]

    if is_code_content(content):
        defs = _SUMMARY_DEFS.findall(content)
        imports = _SUMMARY_IMPORTS.findall(content)
        if defs:
            return (
                f"Code file with {len(defs)} function(s)/class(es), {len(imports)} import(s). "
                f"Contains: {', '.join(defs[:3])}."
            )
        return f"Code file with {len(lines)} lines, {len(imports)} import(s)."

    if "#" in content:
        headings = _HEADING.findall(content)
        if headings:
            names = [re.sub(r"^#+\s+", "", h).strip() for h in headings[:3]]
            return f"Document with {len(headings)} section(s): {', '.join(names)}."

    sentences = [s for s in re.split(r"[.!?]+", content) if s.strip()]
    # Whitespace runs at either end count as empty words
    word_count = len(re.split(r"\s+", content))
    first = ". ".join(sentences[:2])
    excerpt = first[:150] + ("..." if len(first) > 150 else "")
    return f"Text document with {word_count} words, {len(lines)} lines. {excerpt}"


def _pdf_text(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    return "\n".join((page.extract_text() or "") for page in reader.pages)


def _docx_text(content: bytes) -> str:
    doc = Document(io.BytesIO(content))
    return "\n".join(p.text for p in doc.paragraphs).strip()


def extract_document_text(content: bytes, filename: str) -> Tuple[str, Optional[str]]:
    """
    Extract text from a document.

    Returns:
        (text, error) - extracted text and optional error message
    """
    ext = _ext(filename)
    try:
        if ext == ".pdf":
            return _pdf_text(content), None
        if ext == ".docx":
            return _docx_text(content), None
        if ext in PLAIN_DOCUMENT_EXTENSIONS:
            return content.decode("utf-8", errors="replace"), None
        return "", f"Unsupported document type: {ext}"
    except Exception as e:
        logger.warning("[files] Text extraction failed for %s: %s", filename, e)
        return "", f"Text extraction failed: {e}"


def analyze_file(content: bytes, filename: str, mime_type: str) -> Dict[str, Any]:
    analysis: Dict[str, Any] = {
        "type": determine_file_type(mime_type, filename),
        "size": len(content),
    }

    if analysis["type"] in ("text", "code"):
        text = content.decode("utf-8", errors="replace")
        analysis["lineCount"] = len(text.split("\n"))

        if analysis["type"] == "code":
            metrics = analyze_code(text)
            analysis["language"] = detect_language(filename)
            analysis["codeMetrics"] = metrics
            analysis["complexity"] = assess_complexity(metrics, analysis["lineCount"])

        if text:
            analysis["summary"] = generate_summary(text)

    elif analysis["type"] == "document":
        text, error = extract_document_text(content, filename)
        if error:
            analysis["error"] = error
        else:
            analysis["lineCount"] = len(text.split("\n"))
            if text.strip():
                analysis["summary"] = generate_summary(text)

    return analysis
