"""Card templates with CSS and HTML."""

import html
from typing import Dict, Optional


class CardTemplates:
    """Container for all card templates and styling."""

    DEFAULT_STYLE: Dict[str, str] = {
        "card_bg": "#f4f6f9",
        "container_bg": "#ffffff",
        "text_color": "#333333",
        "header_text": "#ffffff",
        "label_color": "#adb5bd",
        "definition_color": "#212529",
        "section_border": "#f2f2f2",
        "card_radius": "12px",
        "card_shadow": "0 2px 10px rgba(0,0,0,0.05)",
        "header_start": "#2c3e50",
        "header_end": "#4ca1af",
    }

    CSS = """
    .card { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; font-size: 16px; line-height: 1.5; color: var(--text-color); background-color: var(--card-bg); margin: 0; padding: 0; }
    .card-container { background: var(--container-bg); border-radius: var(--card-radius); box-shadow: var(--card-shadow); overflow: hidden; max-width: 500px; margin: 10px auto; text-align: left; padding-bottom: 15px; }
    .header-box { padding: 25px 20px; text-align: center; color: var(--header-text) !important; font-weight: bold; background: linear-gradient(135deg, var(--header-start), var(--header-end)); }
    .word-main { font-size: 2.5em; font-weight: 800; margin: 0; letter-spacing: -0.5px; line-height: 1.1; color: var(--header-text); }
    .word-meta { font-size: 0.9em; opacity: 0.9; margin-top: 8px; color: var(--header-text); }
    .section { padding: 12px 20px; border-bottom: 1px solid var(--section-border); }
    .label { font-size: 0.7em; text-transform: uppercase; color: var(--label-color); font-weight: 800; letter-spacing: 1.2px; display: block; margin-bottom: 6px; }
    .definition { font-size: 1.1em; font-weight: 600; color: var(--definition-color); }
    .sentence-container { background-color: #f8f9fa; border-radius: 6px; padding: 6px 10px; margin-bottom: 6px; border-left: 3px solid #dee2e6; }
    .sentence-text { font-size: 0.9em; line-height: 1.35; color: #343a40; }
    audio { height: 28px; margin-top: 4px; }
"""

    @classmethod
    def get_css(cls, style: Optional[Dict[str, str]] = None) -> str:
        """CSS with the style values bound to custom properties."""
        values = {**cls.DEFAULT_STYLE, **(style or {})}
        variables = "; ".join(f"--{k.replace('_', '-')}: {v}" for k, v in values.items())
        return f":root, .card {{ {variables}; }}\n{cls.CSS}"

    # Anki templates use field placeholders; audio fields hold [sound:...] tags
    ANKI_FRONT = """
<div class="card-container">
  <div class="header-box">
    <div class="word-main">{{TargetWord}}</div>
    <div class="word-meta">{{TargetLabel}}</div>
  </div>
  {{AudioTargetWord}}
</div>
"""

    ANKI_BACK = """
<div class="card-container">
  <div class="header-box">
    <div class="word-main">{{TargetWord}}</div>
    <div class="word-meta">{{SourceWord}}</div>
  </div>
  {{AudioTargetWord}}
  <div class="section">
    <span class="label">Definition</span>
    <div class="definition">{{Definition}}</div>
    {{AudioDefinition}}
  </div>
  <div class="section">
    <span class="label">Examples</span>
    <div class="sentence-container"><div class="sentence-text">{{Example1}}</div>{{AudioExample1}}</div>
    <div class="sentence-container"><div class="sentence-text">{{Example2}}</div>{{AudioExample2}}</div>
  </div>
</div>
"""

    HTML_PAGE = """<!DOCTYPE html>
<html lang="{lang}">
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>
{css}
body {{ background: var(--card-bg); padding: 20px; }}
</style>
</head>
<body class="card">
<h1>{title}</h1>
{cards}
</body>
</html>
"""

    @staticmethod
    def audio_tag(url: Optional[str]) -> str:
        """HTML audio player for an audio reference, empty when there is none."""
        if not url:
            return ""
        return f'<audio controls preload="none" src="{html.escape(url, quote=True)}"></audio>'

    @classmethod
    def html_card(cls, target_label: str, record) -> str:
        """Standalone HTML rendering of one word record."""
        esc = html.escape
        audio = record.audio_urls
        return f"""<div class="card-container">
  <div class="header-box">
    <div class="word-main">{esc(record.target_word)}</div>
    <div class="word-meta">{esc(record.source_word)} &middot; {esc(target_label)}</div>
  </div>
  <div class="section">{cls.audio_tag(audio.get("target_word"))}</div>
  <div class="section">
    <span class="label">Definition</span>
    <div class="definition">{esc(record.definition)}</div>
    {cls.audio_tag(audio.get("definition"))}
  </div>
  <div class="section">
    <span class="label">Examples</span>
    <div class="sentence-container"><div class="sentence-text">{esc(record.example_sentence_1)}</div>{cls.audio_tag(audio.get("example_sentence_1"))}</div>
    <div class="sentence-container"><div class="sentence-text">{esc(record.example_sentence_2)}</div>{cls.audio_tag(audio.get("example_sentence_2"))}</div>
  </div>
</div>"""
