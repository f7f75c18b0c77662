"""Reader page served at ``/``.

Playback runs in the browser with the same rules as
:class:`swiftread.playback.PlaybackController`: one self-rescheduling timer,
replay from the start when finished, back to idle at position 0 at the end.
Pivot splits come from the server.
"""

HTML_PAGE = r"""
<!doctype html>
<html lang="en">
<head>
  <meta charset="utf-8" />
  <title>SwiftRead - RSVP Speed Reader</title>
  <meta name="viewport" content="width=device-width, initial-scale=1" />
  <style>
    :root {
      --bg: #0f1115;
      --panel: #181c24;
      --panel2: #202633;
      --text: #e8edf5;
      --muted: #9fb0c8;
      --accent: #66b3ff;
      --danger: #ff5c5c;
      --line: #2e3645;
      --orp-center: #ff6f6f;
      --mono-font: "Roboto Mono", "SF Mono", "SFMono-Regular", Menlo, Consolas, "Liberation Mono", "Courier New", monospace;
      --sans-font: Inter, system-ui, -apple-system, "Segoe UI", Roboto, sans-serif;
    }

    * { box-sizing: border-box; }
    body {
      margin: 0;
      background: var(--bg);
      color: var(--text);
      font-family: var(--sans-font);
    }

    .app { max-width: 860px; margin: 0 auto; padding: 24px 16px; display: grid; gap: 16px; }

    .topbar { display: flex; gap: 10px; align-items: center; justify-content: space-between; }
    .topbar h1 { font-size: 22px; margin: 0; }
    .topbar .sub { color: var(--muted); font-size: 13px; }

    .panel {
      background: var(--panel);
      border: 1px solid var(--line);
      border-radius: 12px;
      padding: 14px;
    }

    .btn, button, select, input[type="text"], input[type="password"] {
      background: var(--panel2);
      color: var(--text);
      border: 1px solid var(--line);
      border-radius: 8px;
      padding: 7px 10px;
    }
    button { cursor: pointer; }
    button:hover, select:hover { border-color: var(--accent); }
    .toggle-on { border-color: var(--accent); color: var(--accent); }

    .stage {
      position: relative;
      height: 180px;
      display: flex;
      align-items: center;
      overflow: hidden;
      font-family: var(--mono-font);
      font-size: 52px;
      white-space: nowrap;
    }
    .stage .guide { position: absolute; top: 14px; bottom: 14px; left: 50%; width: 2px; margin-left: -1px; background: var(--line); }
    .stage .orp-left { flex: 1; text-align: right; }
    .stage .orp-center { flex: 0 0 1ch; text-align: center; color: var(--orp-center); font-weight: 700; }
    .stage .orp-right { flex: 1; text-align: left; }
    .stage .placeholder { width: 100%; text-align: center; color: var(--muted); font-family: var(--sans-font); font-size: 20px; }

    .row { display: flex; gap: 10px; align-items: center; flex-wrap: wrap; }
    .row.spread { justify-content: space-between; }
    .muted { color: var(--muted); font-size: 13px; }
    input[type="range"] { flex: 1; accent-color: var(--accent); }
    textarea {
      width: 100%;
      min-height: 140px;
      background: var(--panel2);
      color: var(--text);
      border: 1px solid var(--line);
      border-radius: 8px;
      padding: 10px;
      font-family: var(--sans-font);
    }
    #playBtn { min-width: 90px; font-weight: 700; }
    #statusLeft.error { color: var(--danger); }
    table { width: 100%; border-collapse: collapse; font-size: 13px; }
    td, th { border-bottom: 1px solid var(--line); padding: 4px 6px; text-align: left; }
    .hidden { display: none; }
  </style>
</head>
<body>
<div class="app">
  <div class="topbar">
    <div>
      <h1>SwiftRead</h1>
      <div class="sub">RSVP Speed Reader</div>
    </div>
    {% if admin_enabled %}<button id="adminBtn" class="btn">Admin</button>{% endif %}
  </div>

  <div id="readerView">
    <div class="panel stage" id="stage">
      <div class="guide"></div>
      <div class="placeholder">Ready to read</div>
    </div>

    <div class="panel">
      <div class="row spread muted">
        <span id="seekLabel">0 / 0 words</span>
        <span id="percentLabel">0%</span>
      </div>
      <div class="row"><input id="seekRange" type="range" min="0" max="0" value="0" /></div>
      <div class="row">
        <button id="resetBtn" class="btn" title="Reset">Reset</button>
        <button id="backBtn" class="btn" title="Back 10 words">-10</button>
        <button id="playBtn" class="btn">Play</button>
        <button id="fwdBtn" class="btn" title="Forward 10 words">+10</button>
        <button id="modeBtn" class="btn toggle-on" title="Pivot mode">ORP</button>
      </div>
      <div class="row">
        <span class="muted">Speed</span>
        <input id="wpmInput" type="range" min="{{ min_wpm }}" max="{{ max_wpm }}" step="{{ wpm_step }}" value="{{ default_wpm }}" />
        <span id="wpmLabel" class="muted">{{ default_wpm }} WPM</span>
      </div>
    </div>

    <div class="panel">
      <div class="row">
        <input id="fileInput" type="file" accept=".pdf,.epub,.txt,.md" />
        <button id="loadBtn" class="btn">Load file</button>
      </div>
      <div class="row">
        <input id="urlInput" type="text" placeholder="https://example.com/article" style="flex: 1" />
        <button id="fetchBtn" class="btn">Fetch</button>
      </div>
      <textarea id="textInput">{{ default_text }}</textarea>
      <div class="row">
        <button id="useTextBtn" class="btn">Use text</button>
        <button id="clearBtn" class="btn">Clear</button>
      </div>
    </div>
  </div>

  <div id="adminView" class="panel hidden">
    <div id="adminLogin" class="row">
      <input id="passwordInput" type="password" placeholder="Enter password" />
      <button id="loginBtn" class="btn">Unlock Dashboard</button>
      <button id="exitAdminBtn" class="btn">Back</button>
    </div>
    <div id="adminStats" class="hidden">
      <div class="row spread">
        <span id="statsSummary" class="muted"></span>
        <span class="row">
          <button id="clearStatsBtn" class="btn">Reset statistics</button>
          <button id="logoutBtn" class="btn">Log out</button>
        </span>
      </div>
      <table>
        <thead><tr><th>When</th><th>Words</th><th>WPM</th></tr></thead>
        <tbody id="statsRows"></tbody>
      </table>
    </div>
  </div>

  <div class="muted" id="statusLeft">Paste text, load a file or fetch a URL.</div>
</div>

<script>
(() => {
  const MIN_WPM = {{ min_wpm }};
  const MAX_WPM = {{ max_wpm }};

  const state = {
    units: [],
    splits: { heuristic: [], center: [] },
    mode: "heuristic",
    status: "idle",
    index: 0,
    wpm: {{ default_wpm }},
    timer: null,
    generation: 0,
    recorded: false,
  };

  const $ = (id) => document.getElementById(id);
  const els = {
    stage: $("stage"), seekRange: $("seekRange"), seekLabel: $("seekLabel"), percentLabel: $("percentLabel"),
    resetBtn: $("resetBtn"), backBtn: $("backBtn"), playBtn: $("playBtn"), fwdBtn: $("fwdBtn"), modeBtn: $("modeBtn"),
    wpmInput: $("wpmInput"), wpmLabel: $("wpmLabel"),
    fileInput: $("fileInput"), loadBtn: $("loadBtn"), urlInput: $("urlInput"), fetchBtn: $("fetchBtn"),
    textInput: $("textInput"), useTextBtn: $("useTextBtn"), clearBtn: $("clearBtn"),
    readerView: $("readerView"), adminView: $("adminView"), adminBtn: $("adminBtn"),
    adminLogin: $("adminLogin"), adminStats: $("adminStats"), passwordInput: $("passwordInput"),
    loginBtn: $("loginBtn"), exitAdminBtn: $("exitAdminBtn"), logoutBtn: $("logoutBtn"),
    clearStatsBtn: $("clearStatsBtn"), statsSummary: $("statsSummary"), statsRows: $("statsRows"),
    statusLeft: $("statusLeft"),
  };

  function setStatus(msg, isError = false) {
    els.statusLeft.textContent = msg;
    els.statusLeft.className = isError ? "muted error" : "muted";
  }

  function clamp(n, lo, hi) { return Math.max(lo, Math.min(hi, n)); }

  function escapeHtml(s) {
    return (s ?? "")
      .replaceAll("&", "&amp;")
      .replaceAll("<", "&lt;")
      .replaceAll(">", "&gt;")
      .replaceAll('"', "&quot;");
  }

  function delayMs() { return 60000 / state.wpm; }

  // -------------------------------
  // Rendering
  // -------------------------------
  function render() {
    const total = state.units.length;
    if (!total) {
      els.stage.innerHTML = `<div class="guide"></div><div class="placeholder">Ready to read</div>`;
    } else {
      const [left, pivot, right] = state.splits[state.mode][state.index];
      els.stage.innerHTML = [
        `<div class="guide"></div>`,
        `<span class="orp-left">${escapeHtml(left)}</span>`,
        `<span class="orp-center">${escapeHtml(pivot)}</span>`,
        `<span class="orp-right">${escapeHtml(right)}</span>`,
      ].join("");
    }
    els.seekRange.max = String(Math.max(total - 1, 0));
    els.seekRange.value = String(state.index);
    els.seekLabel.textContent = `${state.index + (total ? 1 : 0)} / ${total} words`;
    els.percentLabel.textContent = `${total ? Math.round(((state.index + 1) / total) * 100) : 0}%`;
    els.playBtn.textContent = state.status === "playing" ? "Pause" : "Play";
    els.modeBtn.textContent = state.mode === "heuristic" ? "ORP" : "Center";
    els.modeBtn.classList.toggle("toggle-on", state.mode === "heuristic");
    els.wpmLabel.textContent = `${state.wpm} WPM`;
  }

  // -------------------------------
  // Playback
  // -------------------------------
  function cancelTimer() {
    state.generation += 1;
    clearTimeout(state.timer);
    state.timer = null;
  }

  function scheduleNextTick() {
    const generation = state.generation;
    state.timer = setTimeout(() => tick(generation), delayMs());
  }

  function tick(generation) {
    if (generation !== state.generation || state.status !== "playing") return;
    state.timer = null;
    if (state.index >= state.units.length - 1) {
      state.status = "idle";
      state.index = 0;
      setStatus("Finished");
    } else {
      state.index += 1;
      scheduleNextTick();
    }
    render();
  }

  function start() {
    if (!state.units.length || state.status === "playing") return;
    cancelTimer();
    if (state.index >= state.units.length - 1) state.index = 0;
    state.status = "playing";
    scheduleNextTick();
    recordOnce();
    render();
  }

  function pause() {
    if (state.status !== "playing") return;
    cancelTimer();
    state.status = "paused";
    render();
  }

  function togglePlayback() {
    if (state.status === "playing") pause();
    else start();
  }

  function reset() {
    cancelTimer();
    state.status = "idle";
    state.index = 0;
    render();
  }

  function seek(index) {
    state.index = state.units.length ? clamp(index, 0, state.units.length - 1) : 0;
    render();
  }

  function loadPayload(data, label) {
    cancelTimer();
    state.units = data.units || [];
    state.splits = data.decompositions || { heuristic: [], center: [] };
    state.index = 0;
    state.status = "idle";
    state.recorded = false;
    render();
    setStatus(`Loaded ${label} (${state.units.length.toLocaleString()} words)`);
  }

  async function recordOnce() {
    if (state.recorded || state.units.length <= {{ record_min_units }}) return;
    state.recorded = true;
    try {
      await fetch("/api/sessions", {
        method: "POST",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify({ word_count: state.units.length, wpm: state.wpm }),
      });
    } catch (err) {
      console.warn("Could not record session", err);
    }
  }

  // -------------------------------
  // Text sources
  // -------------------------------
  async function postJson(url, body) {
    const res = await fetch(url, {
      method: "POST",
      headers: { "Content-Type": "application/json" },
      body: JSON.stringify(body),
    });
    const data = await res.json();
    if (!res.ok || !data.ok) throw new Error(data.error || `Request failed (${res.status})`);
    return data;
  }

  async function useText() {
    try {
      loadPayload(await postJson("/api/text", { text: els.textInput.value }), "text");
    } catch (err) {
      setStatus(`Load failed: ${err.message || err}`, true);
    }
  }

  async function loadFile() {
    const file = els.fileInput.files && els.fileInput.files[0];
    if (!file) return setStatus("Choose a file first.", true);
    setStatus("Uploading and extracting text...");
    const form = new FormData();
    form.append("file", file);
    try {
      const res = await fetch("/api/extract", { method: "POST", body: form });
      const data = await res.json();
      if (!res.ok || !data.ok) throw new Error(data.error || "Extraction failed");
      els.textInput.value = data.text || "";
      loadPayload(data, data.filename);
    } catch (err) {
      setStatus(`Load failed: ${err.message || err}`, true);
    }
  }

  async function fetchUrl() {
    setStatus("Fetching page...");
    try {
      const data = await postJson("/api/fetch", { url: els.urlInput.value.trim() });
      els.textInput.value = data.text || "";
      loadPayload(data, data.url);
    } catch (err) {
      setStatus(`Fetch failed: ${err.message || err}`, true);
    }
  }

  // -------------------------------
  // Admin
  // -------------------------------
  function showAdmin(on) {
    pause();
    els.readerView.classList.toggle("hidden", on);
    els.adminView.classList.toggle("hidden", !on);
    if (on) loadStats();
  }

  async function loadStats() {
    const res = await fetch("/admin/stats");
    if (res.status === 401) {
      els.adminLogin.classList.remove("hidden");
      els.adminStats.classList.add("hidden");
      return;
    }
    const data = await res.json();
    els.adminLogin.classList.add("hidden");
    els.adminStats.classList.remove("hidden");
    els.statsSummary.textContent =
      `users ${data.unique_users} | texts ${data.total_texts_read} | avg words ${data.avg_word_count} | median ${data.median_word_count} | avg wpm ${data.avg_wpm}`;
    els.statsRows.innerHTML = data.sessions.map((s) =>
      `<tr><td>${new Date(s.timestamp * 1000).toLocaleString()}</td><td>${s.word_count}</td><td>${s.wpm}</td></tr>`
    ).join("");
  }

  async function login() {
    try {
      await postJson("/admin/login", { password: els.passwordInput.value });
      els.passwordInput.value = "";
      await loadStats();
    } catch (err) {
      setStatus(err.message || "Incorrect password", true);
    }
  }

  // -------------------------------
  // Wiring
  // -------------------------------
  els.playBtn.addEventListener("click", togglePlayback);
  els.resetBtn.addEventListener("click", reset);
  els.backBtn.addEventListener("click", () => seek(state.index - 10));
  els.fwdBtn.addEventListener("click", () => seek(state.index + 10));
  els.seekRange.addEventListener("input", () => seek(parseInt(els.seekRange.value, 10) || 0));
  els.modeBtn.addEventListener("click", () => {
    state.mode = state.mode === "heuristic" ? "center" : "heuristic";
    render();
  });
  els.wpmInput.addEventListener("input", () => {
    // Applies from the next scheduled tick.
    state.wpm = clamp(parseInt(els.wpmInput.value, 10) || MIN_WPM, MIN_WPM, MAX_WPM);
    render();
  });
  els.useTextBtn.addEventListener("click", useText);
  els.loadBtn.addEventListener("click", loadFile);
  els.fetchBtn.addEventListener("click", fetchUrl);
  els.clearBtn.addEventListener("click", () => {
    els.textInput.value = "";
    loadPayload({ units: [], decompositions: { heuristic: [], center: [] } }, "empty text");
  });

  if (els.adminBtn) {
    els.adminBtn.addEventListener("click", () => showAdmin(true));
    els.exitAdminBtn.addEventListener("click", () => showAdmin(false));
    els.loginBtn.addEventListener("click", login);
    els.logoutBtn.addEventListener("click", async () => {
      await fetch("/admin/logout", { method: "POST" });
      showAdmin(false);
    });
    els.clearStatsBtn.addEventListener("click", async () => {
      if (!confirm("Are you sure you want to reset all statistics?")) return;
      await fetch("/admin/clear", { method: "POST" });
      await loadStats();
    });
  }

  document.addEventListener("keydown", (e) => {
    if (e.target === els.textInput || e.target === els.urlInput || e.target === els.passwordInput) return;
    if (e.code === "Space") { e.preventDefault(); togglePlayback(); }
    else if (e.key === "ArrowLeft") seek(state.index - 10);
    else if (e.key === "ArrowRight") seek(state.index + 10);
  });

  useText();
})();
</script>
</body>
</html>
"""
