"""
HTML fragments for the static site.

Plain string templates: the pages are small and fixed, so a template engine
would add a dependency without removing any code. Every value that comes from
the document goes through `html.escape` before it is substituted.
"""

from string import Template
from typing import Dict

COMMON_STYLES = """<style>
*{margin:0;padding:0;box-sizing:border-box}
body{font-family:-apple-system,BlinkMacSystemFont,"Segoe UI",Roboto,Helvetica,Arial,sans-serif;background:#1c1c1e;color:#fff;min-height:100vh}
.container{max-width:700px;margin:0 auto;padding:20px}
header{display:flex;justify-content:space-between;align-items:center;padding:16px 0;border-bottom:1px solid #38383a}
h1{font-size:28px;font-weight:600}
.btn{background:#ff9f0a;color:#000;border:none;padding:10px 20px;border-radius:8px;font-size:16px;cursor:pointer;text-decoration:none;display:inline-block}
.btn:hover{background:#ffb340}
.btn-secondary{background:#38383a;color:#fff}
.btn-secondary:hover{background:#48484a}
.user-list{margin-top:24px}
.user-card{background:#2c2c2e;border-radius:12px;padding:16px;margin-bottom:12px;transition:background .2s}
.user-card:hover{background:#3a3a3c}
.user-card a{text-decoration:none;color:inherit;display:block}
.user-name{font-size:18px;font-weight:500;margin-bottom:4px}
.user-preview{color:#98989f;font-size:14px;white-space:nowrap;overflow:hidden;text-overflow:ellipsis}
.user-date{color:#636366;font-size:12px;margin-top:8px}
.note{background:#2c2c2e;border-radius:12px;padding:16px;margin-bottom:12px}
.note-text{font-size:16px;line-height:1.5;white-space:pre-wrap}
.note-date{color:#636366;font-size:12px;margin-top:12px}
.back{color:#ff9f0a;text-decoration:none;font-size:14px}
.empty{color:#636366;text-align:center;padding:40px}
</style>"""

PAGE = Template("""<!DOCTYPE html>
<html lang="$lang">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width,initial-scale=1">
<title>$title</title>
<meta name="description" content="$description">
$styles
</head>
<body>
<div class="container">
$body
</div>
</body>
</html>
""")

INDEX_BODY = Template("""  <header>
    <h1>$heading</h1>
    <a href="./admin.html" class="btn">$new_label</a>
  </header>
  <div class="user-list">
$cards
  </div>""")

USER_CARD = Template("""    <div class="user-card">
      <a href="./$user_id.html">
        <div class="user-name">$user_id</div>
        <div class="user-preview">$preview</div>
        <div class="user-date">$meta</div>
      </a>
    </div>""")

USER_BODY = Template("""  <header>
    <a href="./index.html" class="back">$back_label</a>
    <a href="./admin.html?user=$user_query" class="btn btn-secondary">$add_label</a>
  </header>
  <h1 style="margin:24px 0 16px">$user_id</h1>
  <div class="notes">
$notes
  </div>""")

NOTE_BLOCK = Template("""    <div class="note">
      <div class="note-text">$text</div>
      <div class="note-date">$date</div>
    </div>""")

EMPTY_BLOCK = Template("""    <div class="empty">$message</div>""")

STRINGS: Dict[str, Dict[str, str]] = {
    "en": {
        "index_title": "NoteMe — Notes",
        "index_description": "A static notes board",
        "index_heading": "📝 Notes",
        "new_label": "+ New",
        "no_notes_preview": "No notes",
        "note_count": "{count} notes",
        "index_empty": "No notes yet",
        "user_title": "{user_id} — NoteMe",
        "user_description": "Notes by {user_id}",
        "back_label": "← All notes",
        "add_label": "Add",
        "user_empty": "This user has no notes yet",
    },
    "ru": {
        "index_title": "NoteMe — Заметки",
        "index_description": "Статическая соцсеть заметок",
        "index_heading": "📝 Заметки",
        "new_label": "+ Новая",
        "no_notes_preview": "Нет заметок",
        "note_count": "{count} заметок",
        "index_empty": "Пока нет заметок",
        "user_title": "{user_id} — NoteMe",
        "user_description": "Заметки пользователя {user_id}",
        "back_label": "← Все заметки",
        "add_label": "Добавить",
        "user_empty": "У пользователя пока нет заметок",
    },
}
