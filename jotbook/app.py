# jotbook/app.py
from __future__ import annotations
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field

from .config import Settings
from .errors import NoteNotFound, NoteValidationError, StorageError
from .models import Note, NoteUpdate
from .store import NoteStore

logger = logging.getLogger(__name__)


# ---------- Schemas ----------
class NoteCreate(BaseModel):
    title: str
    body: str = ""
    tags: list[str] = Field(default_factory=list)


class Stats(BaseModel):
    total_notes: int
    total_tags: int
    last_updated: Optional[str] = None


def _store(request: Request) -> NoteStore:
    return request.app.state.store


def create_app(store: NoteStore, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API around an already loaded store."""
    settings = settings or Settings.from_env()
    app = FastAPI(title="Jotbook API")
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    # ---------- errors ----------
    @app.exception_handler(NoteNotFound)
    async def _not_found(request: Request, exc: NoteNotFound):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NoteValidationError)
    async def _invalid(request: Request, exc: NoteValidationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": "Malformed request", "errors": jsonable_encoder(exc.errors())})

    @app.exception_handler(StorageError)
    async def _storage(request: Request, exc: StorageError):
        logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": f"Storage error: {exc.reason}"})

    # ---------- API ----------
    @app.get("/api/notes", response_model=list[Note])
    def api_list_notes(request: Request, search: Optional[str] = None, tag: Optional[str] = None):
        s = _store(request)
        notes = s.search(search) if search is not None else s.list()
        if tag:
            notes = [n for n in notes if n.has_tag(tag)]
        return notes

    @app.post("/api/notes", response_model=Note, status_code=201)
    def api_create_note(request: Request, payload: NoteCreate):
        return _store(request).create(payload.title, payload.body, payload.tags)

    @app.get("/api/notes/search/{query}", response_model=list[Note])
    def api_search_notes(request: Request, query: str):
        return _store(request).search(query)

    @app.get("/api/notes/{note_id}", response_model=Note)
    def api_get_note(request: Request, note_id: str):
        return _store(request).get(note_id)

    @app.api_route("/api/notes/{note_id}", methods=["PUT", "PATCH"], response_model=Note)
    def api_update_note(request: Request, note_id: str, payload: NoteUpdate):
        return _store(request).update(note_id, payload)

    @app.delete("/api/notes/{note_id}")
    def api_delete_note(request: Request, note_id: str):
        _store(request).delete(note_id)
        return {"ok": True}

    @app.get("/api/tags", response_model=list[str])
    def api_tags(request: Request):
        return _store(request).tags()

    @app.get("/api/stats", response_model=Stats)
    def api_stats(request: Request):
        stats = _store(request).stats()
        last = stats["last_updated"]
        return Stats(
            total_notes=stats["total_notes"],
            total_tags=stats["total_tags"],
            last_updated=last.isoformat() if last else None,
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def index():
        return HTMLResponse(content=_INDEX)

    return app


# ---------- Tiny UI (single file, no build) ----------
_INDEX = """
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8"/>
  <meta name="viewport" content="width=device-width,initial-scale=1"/>
  <title>Jotbook</title>
  <style>
    body { font-family: system-ui, sans-serif; margin: 0; background: #f8fafc; color: #0f172a; }
    .wrap { max-width: 860px; margin: 0 auto; padding: 24px; }
    .card { background: #fff; border: 1px solid #cbd5e1; border-radius: 12px; padding: 12px 16px; margin: 10px 0; }
    .pill { padding: 2px 8px; border-radius: 999px; font-size: 12px; border: 1px solid #cbd5e1; margin-right: 4px; }
    .btn { padding: 6px 12px; border-radius: 10px; border: 1px solid #cbd5e1; background: #fff; cursor: pointer; }
    .btn-primary { background: #2563eb; color: #fff; border-color: #2563eb; }
    input, textarea { width: 100%; box-sizing: border-box; padding: 8px; margin: 4px 0; border: 1px solid #cbd5e1; border-radius: 8px; }
    .muted { color: #64748b; font-size: 13px; }
  </style>
</head>
<body>
  <div class="wrap">
    <h1>Jotbook</h1>
    <input id="q" placeholder="Search notes..."/>
    <div class="card">
      <input id="title" placeholder="Title"/>
      <textarea id="body" rows="4" placeholder="Write something..."></textarea>
      <input id="tags" placeholder="tags, comma separated"/>
      <button id="save" class="btn btn-primary">Add note</button>
      <span id="msg" class="muted"></span>
    </div>
    <div id="list"></div>
  </div>
  <script>
    const $ = s => document.querySelector(s);
    async function j(url, opts = {}) {
      const res = await fetch(url, { headers: { 'Content-Type': 'application/json' }, ...opts });
      const data = await res.json();
      if (!res.ok) throw new Error(data.detail || res.statusText);
      return data;
    }
    function escapeHtml(s){ return (s||'').replace(/[&<>"]/g, c=>({'&':'&amp;','<':'&lt;','>':'&gt;','"':'&quot;'}[c])); }
    async function load() {
      const q = $('#q').value;
      const notes = await j('/api/notes' + (q ? '?search=' + encodeURIComponent(q) : ''));
      $('#list').innerHTML = notes.length ? notes.map(n => `
        <div class="card">
          <strong>${escapeHtml(n.title)}</strong>
          <button class="btn" style="float:right" onclick="del('${n.id}')">Delete</button>
          <p>${escapeHtml(n.body).replace(/\\n/g, '<br/>')}</p>
          <div>${n.tags.map(t => `<span class="pill">#${escapeHtml(t)}</span>`).join('')}</div>
          <div class="muted">updated ${new Date(n.updated_at).toLocaleString()}</div>
        </div>`).join('') : '<p class="muted">No notes found.</p>';
    }
    async function del(id) {
      if (!confirm('Delete this note?')) return;
      await j(`/api/notes/${id}`, { method: 'DELETE' });
      load();
    }
    $('#save').addEventListener('click', async () => {
      const title = $('#title').value.trim();
      if (!title) { $('#msg').textContent = 'Title required'; return; }
      const tags = $('#tags').value.split(',').map(s => s.trim()).filter(Boolean);
      try {
        await j('/api/notes', { method: 'POST', body: JSON.stringify({ title, body: $('#body').value, tags }) });
        $('#title').value = ''; $('#body').value = ''; $('#tags').value = ''; $('#msg').textContent = 'Created';
      } catch (e) { $('#msg').textContent = e.message; }
      load();
    });
    $('#q').addEventListener('input', load);
    load();
  </script>
</body>
</html>
"""
