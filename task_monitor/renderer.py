"""
Dashboard renderer.

Turns a snapshot and the current configuration into one self-contained HTML
page. The page embeds the snapshot for the first paint and then polls
task-monitor-data.json for updates.
"""

import json
from html import escape

from task_monitor.models import MonitorConfig, TaskMonitorData


CSS = """* { box-sizing: border-box; margin: 0; padding: 0; }
body {
  font-family: 'SF Mono', 'Monaco', 'Inconsolata', 'Fira Code', monospace;
  background: #0d1117;
  color: #c9d1d9;
  padding: 24px;
  min-height: 100vh;
}
.toolbar {
  display: flex;
  align-items: center;
  gap: 16px;
  padding: 12px 16px;
  background: #161b22;
  border: 1px solid #30363d;
  border-radius: 6px;
  margin-bottom: 20px;
}
.toolbar h1 { font-size: 14px; color: #8b949e; text-transform: uppercase; letter-spacing: 0.5px; }
.toolbar select {
  background: #0d1117;
  color: #c9d1d9;
  border: 1px solid #30363d;
  padding: 6px 10px;
  border-radius: 4px;
  font-family: inherit;
  min-width: 200px;
}
.stats { display: flex; gap: 16px; margin-bottom: 20px; font-size: 13px; color: #8b949e; }
.stats strong { color: #c9d1d9; }
.task {
  padding: 10px 14px;
  border: 1px solid #30363d;
  border-radius: 6px;
  margin-bottom: 8px;
  background: #161b22;
}
.task .id { color: #8b949e; margin-right: 8px; }
.task .status { float: right; font-size: 12px; }
.task.pending .status { color: #d29922; }
.task.in_progress .status { color: #58a6ff; }
.task.completed { opacity: 0.6; }
.task.completed .status { color: #3fb950; }
.task.blocked { border-style: dashed; }
.task .blockers { font-size: 12px; color: #f85149; margin-top: 4px; }
.task .active { font-size: 12px; color: #58a6ff; margin-top: 4px; }
.empty { color: #8b949e; padding: 40px; text-align: center; }
.footer { margin-top: 24px; font-size: 12px; color: #484f58; }
.stale { color: #d29922; }
.toolbar button {
  background: #238636;
  color: #fff;
  border: none;
  padding: 6px 12px;
  border-radius: 4px;
  font-family: inherit;
  cursor: pointer;
}
.toolbar .reset { font-size: 12px; color: #8b949e; }
.toast {
  position: fixed;
  bottom: 24px;
  right: 24px;
  max-width: 480px;
  padding: 12px 16px;
  background: #161b22;
  border: 1px solid #3fb950;
  border-radius: 6px;
  font-size: 12px;
  display: none;
}
.toast.show { display: block; }
.toast code { display: block; margin-top: 6px; color: #8b949e; word-break: break-all; }
"""

JS = """let MONITOR_DATA = window.__MONITOR_DATA__ || null;
let AGENT_NAMES = window.__AGENT_NAMES__ || [];
let pollInterval = window.__POLL_INTERVAL__ || 2000;
let pollTimer = null;
let fetchFailed = false;

function escapeHtml(str) {
  return String(str).replace(/&/g, '&amp;').replace(/</g, '&lt;').replace(/>/g, '&gt;');
}

function restartPolling(interval) {
  pollInterval = interval;
  if (pollTimer) clearInterval(pollTimer);
  pollTimer = setInterval(fetchData, pollInterval);
  const footer = document.querySelector('.footer');
  if (footer) footer.textContent = 'Real-time updates (polling every ' + (pollInterval / 1000) + 's)';
}

async function loadSettings() {
  try {
    const resp = await fetch('/api/config', { cache: 'no-store' });
    if (!resp.ok) return;
    const config = await resp.json();
    if (Array.isArray(config.agentNames) && config.agentNames.length > 0) AGENT_NAMES = config.agentNames;
    if (config.pollInterval >= 500 && config.pollInterval <= 60000 && config.pollInterval !== pollInterval) {
      restartPolling(config.pollInterval);
    }
  } catch (e) {
    // Config API not served; keep embedded values
  }
}

async function fetchData() {
  try {
    const response = await fetch('task-monitor-data.json?_=' + Date.now(), { cache: 'no-store' });
    if (!response.ok) throw new Error('Failed: ' + response.status);
    MONITOR_DATA = await response.json();
    fetchFailed = false;
  } catch (err) {
    fetchFailed = true;
  }
  render();
}

function getSelectedListId() {
  const stored = localStorage.getItem('selectedListId');
  const lists = MONITOR_DATA ? MONITOR_DATA.taskLists : [];
  if (stored && lists.some(l => l.id === stored)) return stored;
  return MONITOR_DATA ? MONITOR_DATA.selectedListId : '';
}

function switchTaskList(listId) {
  localStorage.setItem('selectedListId', listId);
  render();
}

function getNextAgentName() {
  const count = parseInt(localStorage.getItem('agentCount') || '0', 10);
  return count < AGENT_NAMES.length ? AGENT_NAMES[count] : 'agent-' + (count + 1);
}

function incrementAgentCount() {
  const count = parseInt(localStorage.getItem('agentCount') || '0', 10);
  localStorage.setItem('agentCount', String(count + 1));
}

function resetAgentCount() {
  localStorage.setItem('agentCount', '0');
  render();
}

function showToast(message, command) {
  const toast = document.getElementById('toast');
  toast.innerHTML = escapeHtml(message) + '<code>' + escapeHtml(command) + '</code>';
  toast.classList.add('show');
  setTimeout(() => toast.classList.remove('show'), 4000);
}

function buildNextAvailableCommand(listId, agentName) {
  return 'cd ' + MONITOR_DATA.projectDir + ' && ./scripts/cda-agent.sh --task-list ' + listId +
    ' --agent ' + agentName + ' -- --model opus';
}

function launchNextAvailable() {
  if (!MONITOR_DATA || MONITOR_DATA.taskLists.length === 0) return;
  const command = buildNextAvailableCommand(getSelectedListId(), getNextAgentName());
  const done = (message) => {
    incrementAgentCount();
    showToast(message, command);
    render();
  };
  navigator.clipboard.writeText(command)
    .then(() => done('Copied! Paste in a terminal to start the agent'))
    .catch(() => {
      console.log('Command: ' + command);
      done('Copy failed. See console (F12)');
    });
}

function getBlockerStatus(task, allTasks) {
  const blockedBy = task.blockedBy || [];
  if (blockedBy.length === 0) return { isBlocked: false, blockers: [], ready: false };
  const blockers = blockedBy.map(id => {
    const blocker = allTasks.find(t => t.id === id);
    return { id, done: !!blocker && blocker.status === 'completed', subject: blocker ? blocker.subject : 'Unknown' };
  });
  const allDone = blockers.every(b => b.done);
  return { isBlocked: !allDone, blockers, ready: allDone };
}

function render() {
  const content = document.getElementById('content');
  const selector = document.getElementById('list-selector');
  const stats = document.getElementById('stats');
  const nextAgent = document.getElementById('next-agent');
  if (nextAgent) nextAgent.textContent = getNextAgentName();
  if (!MONITOR_DATA || MONITOR_DATA.taskLists.length === 0) {
    selector.innerHTML = '';
    stats.innerHTML = '';
    content.innerHTML = '<div class="empty">No task lists found</div>';
    return;
  }
  const selectedId = getSelectedListId();
  selector.innerHTML = MONITOR_DATA.availableLists.map(s =>
    '<option value="' + escapeHtml(s.id) + '"' + (s.id === selectedId ? ' selected' : '') + '>' +
    escapeHtml(s.id) + ' (' + s.completedCount + '/' + s.taskCount + ')</option>'
  ).join('');
  const list = MONITOR_DATA.taskLists.find(l => l.id === selectedId) || MONITOR_DATA.taskLists[0];
  let available = 0;
  const rows = list.tasks.map(task => {
    const blockerStatus = getBlockerStatus(task, list.tasks);
    if (task.status === 'pending' && !blockerStatus.isBlocked) available++;
    const classes = ['task', task.status];
    if (blockerStatus.isBlocked) classes.push('blocked');
    let html = '<div class="' + classes.join(' ') + '">';
    html += '<span class="id">#' + escapeHtml(task.id) + '</span>' + escapeHtml(task.subject);
    html += '<span class="status">' + escapeHtml(task.status) + (task.owner ? ' @' + escapeHtml(task.owner) : '') + '</span>';
    if (task.status === 'in_progress' && task.activeForm) html += '<div class="active">' + escapeHtml(task.activeForm) + '</div>';
    if (blockerStatus.isBlocked) {
      const open = blockerStatus.blockers.filter(b => !b.done).map(b => '#' + escapeHtml(b.id));
      html += '<div class="blockers">Blocked by ' + open.join(', ') + '</div>';
    }
    return html + '</div>';
  });
  const inProgress = list.tasks.filter(t => t.status === 'in_progress').length;
  const completed = list.tasks.filter(t => t.status === 'completed').length;
  stats.innerHTML =
    '<span>Total <strong>' + list.tasks.length + '</strong></span>' +
    '<span>Available <strong>' + available + '</strong></span>' +
    '<span>In progress <strong>' + inProgress + '</strong></span>' +
    '<span>Completed <strong>' + completed + '</strong></span>' +
    (fetchFailed ? '<span class="stale">Showing last known data</span>' : '');
  content.innerHTML = rows.join('');
}

document.addEventListener('DOMContentLoaded', () => {
  render();
  loadSettings();
  fetchData();
  restartPolling(pollInterval);
});
"""


def _embed_json(value) -> str:
    """Serialize a value for embedding inside a <script> element."""
    return json.dumps(value, ensure_ascii=False).replace("</", "<\\/")


def render_dashboard(snapshot: TaskMonitorData, config: MonitorConfig) -> str:
    """
    Render the dashboard page.

    Args:
        snapshot: Snapshot to embed
        config: Configuration supplying poll interval and agent names

    Returns:
        Complete HTML document
    """
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <meta http-equiv="Cache-Control" content="no-cache, no-store, must-revalidate">
  <title>Claude Tasks Monitor</title>
  <style>{CSS}</style>
</head>
<body>
  <div class="toolbar">
    <h1>Tasks</h1>
    <select id="list-selector" onchange="switchTaskList(this.value)"></select>
    <button onclick="launchNextAvailable()">Launch next as <span id="next-agent"></span></button>
    <a href="#" class="reset" onclick="resetAgentCount(); return false;">reset</a>
    <span class="project">{escape(snapshot.project_dir)}</span>
  </div>
  <div class="toast" id="toast"></div>
  <div class="stats" id="stats"></div>
  <div id="content"></div>
  <div class="footer">Real-time updates (polling every {config.poll_interval_seconds_text}s)</div>
  <script>
    window.__MONITOR_DATA__ = {_embed_json(snapshot.to_dict())};
    window.__AGENT_NAMES__ = {_embed_json(config.agent_names)};
    window.__POLL_INTERVAL__ = {config.poll_interval};
  </script>
  <script>{JS}</script>
</body>
</html>
"""
