# _FastAPI.py
# Renders the full HTML for the quote page. Keep this file self‑contained

def get_index_html() -> str:
    return r"""<!doctype html><html><head>
<meta charset="utf-8"><meta name="viewport" content="width=device-width, initial-scale=1">
<title>Dynamic Quote Generator</title>
<link rel="icon" type="image/svg+xml" href="/favicon.svg">
<style>
  :root{
    --bg:#000; --panel:#0b0b0f; --muted:#9aa4b2; --fg:#f2f4f8;
    --accent:#7c5cff; --accent2:#19c37d; --danger:#ff4d4f; --border:#1a1a24;
    --grad1:linear-gradient(135deg,#7c5cff,#2da1ff);
  }
  *{box-sizing:border-box}
  body{
    margin:0;
    background:radial-gradient(1200px 600px at 20% -10%, #15152544, transparent), var(--bg);
    color:var(--fg);
    font:14px/1.5 ui-sans-serif,system-ui,Segoe UI,Roboto;
  }
  header{
    position:sticky;top:0;z-index:10;
    background:linear-gradient(180deg,rgba(10,10,14,.85),rgba(10,10,14,.6),transparent);
    backdrop-filter:blur(6px);
    padding:14px 18px;border-bottom:1px solid var(--border);
    display:flex;gap:16px;align-items:center
  }
  header .sync{margin-left:auto;color:var(--muted);font-size:12px}
  main{max-width:760px;margin:24px auto;padding:0 16px;display:flex;flex-direction:column;gap:16px}
  .card{
    background:linear-gradient(180deg,rgba(255,255,255,.02),transparent),var(--panel);
    border:1px solid var(--border);border-radius:14px;padding:18px;
    box-shadow:0 0 40px #000 inset;
  }
  .card h2{margin:0 0 12px;font-size:13px;letter-spacing:.08em;text-transform:uppercase;color:var(--muted)}
  #quoteDisplay{font-size:20px;min-height:64px}
  .row{display:flex;gap:8px;flex-wrap:wrap;align-items:center}
  input,select{
    background:#0b0b16;color:var(--fg);border:1px solid var(--border);
    border-radius:10px;padding:8px 10px;min-width:0;flex:1
  }
  .btn{
    padding:8px 14px;border-radius:10px;border:1px solid var(--border);cursor:pointer;
    background:var(--grad1);color:#fff;font-weight:600
  }
  .btn.ghost{background:#0b0b16;color:#dfe6ff}
  .btn:disabled{opacity:.55;cursor:not-allowed}
  #toasts{position:fixed;right:16px;bottom:16px;display:flex;flex-direction:column;gap:8px;z-index:1000}
  .msg{padding:10px 14px;border-radius:10px;border:1px solid var(--border);background:#0e0e15;cursor:pointer}
  .msg.success{border-color:var(--accent2)}
  .msg.error{border-color:var(--danger)}
  .muted{color:var(--muted)}
  .hidden{display:none}
</style></head>
<body>
<header>
  <strong>Dynamic Quote Generator</strong>
  <span class="sync" id="syncStatus">sync: idle</span>
</header>
<main>
  <section class="card">
    <h2>Quote</h2>
    <div id="quoteDisplay" class="muted">Loading…</div>
    <div class="row">
      <button id="newQuote" class="btn">Show New Quote</button>
      <select id="categoryFilter"></select>
      <span id="quoteCount" class="muted"></span>
    </div>
  </section>

  <section class="card">
    <h2>Add a quote</h2>
    <div class="row">
      <input id="newQuoteText" type="text" placeholder="Enter a new quote">
      <input id="newQuoteCategory" type="text" placeholder="Enter quote category">
      <button id="addQuoteBtn" class="btn">Add Quote</button>
    </div>
  </section>

  <section class="card">
    <h2>Import / export</h2>
    <div class="row">
      <input type="file" id="importFile" accept=".json">
      <a class="btn ghost" href="/api/export" download="quotes.json">Export Quotes</a>
      <button id="syncNow" class="btn ghost">Sync now</button>
    </div>
  </section>
</main>
<div id="toasts"></div>

<script>
  let lastNoticeId = 0;

  async function api(path, opts){
    const r = await fetch(path, Object.assign({headers:{'Content-Type':'application/json'}}, opts || {}));
    let js = null;
    try { js = await r.json(); } catch(_) {}
    return { ok: r.ok, status: r.status, js: js || {} };
  }

  function toast(text, kind, ttlMs){
    const el = document.createElement('div');
    el.className = 'msg ' + (kind || 'info');
    el.textContent = text;
    el.onclick = () => el.remove();
    document.getElementById('toasts').appendChild(el);
    setTimeout(() => el.remove(), ttlMs || 4000);
  }

  function renderView(v){
    const sel = document.getElementById('categoryFilter');
    sel.innerHTML = '';
    (v.categories || ['all']).forEach(c => {
      const o = document.createElement('option');
      o.value = c; o.textContent = c === 'all' ? 'All Categories' : c;
      sel.appendChild(o);
    });
    sel.value = v.selected || 'all';
    document.getElementById('quoteDisplay').textContent = v.quote_text || '';
    document.getElementById('quoteCount').textContent = `${v.count} of ${v.total}`;
  }

  async function loadView(){
    const r = await api('/api/view');
    if (r.ok) renderView(r.js);
  }

  async function showRandomQuote(){
    const r = await api('/api/quote/random');
    if (r.ok) renderView(r.js.view);
  }

  async function filterQuotes(){
    const category = document.getElementById('categoryFilter').value;
    const r = await api('/api/filter', {method:'POST', body: JSON.stringify({category})});
    if (r.ok) renderView(r.js.view);
  }

  async function addQuote(){
    const t = document.getElementById('newQuoteText');
    const c = document.getElementById('newQuoteCategory');
    const r = await api('/api/quotes', {method:'POST', body: JSON.stringify({text: t.value, category: c.value})});
    if (!r.ok){ alert(r.js.error || 'Please enter both quote and category.'); return; }
    t.value = ''; c.value = '';
    renderView(r.js.view);
  }

  async function importFromJsonFile(ev){
    const file = ev.target.files && ev.target.files[0];
    if (!file) return;
    const body = await file.text();
    const r = await api('/api/import', {method:'POST', body});
    if (!r.ok){ alert(r.js.error || 'Import failed.'); }
    else { renderView(r.js.view); }
    ev.target.value = '';
  }

  async function syncNow(){
    const btn = document.getElementById('syncNow');
    btn.disabled = true;
    try { await api('/api/sync/run', {method:'POST'}); await loadView(); }
    finally { btn.disabled = false; }
  }

  async function pollNotices(){
    const r = await api('/api/notifications?since=' + lastNoticeId);
    if (!r.ok) return;
    let merged = false;
    for (const n of (r.js.items || [])){
      lastNoticeId = Math.max(lastNoticeId, n.id);
      toast(n.message, n.kind, Math.max(500, (n.expires_at - n.ts) * 1000));
      if (/merged/.test(n.message)) merged = true;
    }
    if (merged) loadView();
  }

  async function pollSync(){
    const r = await api('/api/sync/status');
    if (!r.ok) return;
    const s = r.js.engine || {};
    const when = s.last_run ? new Date(s.last_run * 1000).toLocaleTimeString() : 'never';
    document.getElementById('syncStatus').textContent = `sync: ${s.status || 'idle'} · last ${when}`;
  }

  document.getElementById('newQuote').addEventListener('click', showRandomQuote);
  document.getElementById('addQuoteBtn').addEventListener('click', addQuote);
  document.getElementById('categoryFilter').addEventListener('change', filterQuotes);
  document.getElementById('importFile').addEventListener('change', importFromJsonFile);
  document.getElementById('syncNow').addEventListener('click', syncNow);

  loadView();
  setInterval(pollNotices, 1000);
  setInterval(pollSync, 5000);
</script>
</body></html>
"""
