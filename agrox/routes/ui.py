"""
Server-rendered screens.

Every guarded page runs the same check on each request: no session sends the
browser to /login, a failed role check sends it to /dashboard.
"""
import html as _html
import json
from typing import Callable, Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from ..db import get_db
from ..auth.security import SessionUser, get_optional_session
from ..i18n import LANGUAGE_COOKIE, get_request_language, normalize_language, translate
from ..services import activities as activity_svc
from ..services import permissions
from ..services.dashboard import user_summary


router = APIRouter(tags=["ui"])


class GuardRedirect(Exception):
    def __init__(self, location: str):
        self.location = location


def register_guard_redirects(app: FastAPI) -> None:
    @app.exception_handler(GuardRedirect)
    async def _redirect(request: Request, exc: GuardRedirect):
        return RedirectResponse(url=exc.location, status_code=303)


def _guard(check: Optional[Callable] = None):
    def _dep(session: Optional[SessionUser] = Depends(get_optional_session), db: Session = Depends(get_db)):
        if session is None:
            raise GuardRedirect("/login")
        if check is not None and not check(session.id, db):
            raise GuardRedirect("/dashboard")
        return session

    return _dep


session_guard = _guard()
admin_guard = _guard(permissions.is_admin_or_super_admin)
coordinator_guard = _guard(permissions.is_coordenador_or_above)
super_admin_guard = _guard(lambda user_id, db: permissions.is_user_role(user_id, "SUPER_ADMIN", db))


SHELL = """<!doctype html>
<html lang="{{LANG}}">
<meta charset='utf-8'>
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{{TITLE}} · AGRO-X Control</title>
<style>
body{font-family:system-ui,Segoe UI,Roboto,Helvetica,Arial,sans-serif;margin:0;background:#f8fafc;color:#0f172a}
header{background:#14532d;color:#fff;padding:12px 20px;display:flex;justify-content:space-between;align-items:center}
header a{color:#fff;text-decoration:none}
main{max-width:960px;margin:0 auto;padding:20px}
.grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(180px,1fr));gap:12px}
.tile{display:block;padding:18px;border-radius:10px;background:#fff;border:1px solid #e2e8f0;color:#0f172a;text-decoration:none;font-weight:600}
label{display:block;margin:10px 0 4px}
input,select,textarea{width:100%;padding:8px;border:1px solid #cbd5e1;border-radius:6px;box-sizing:border-box}
button{margin-top:12px;padding:8px 14px;border:0;border-radius:6px;background:#166534;color:#fff;cursor:pointer}
td button{margin:0 4px 0 0}
table{width:100%;border-collapse:collapse;background:#fff}
td,th{border-bottom:1px solid #e2e8f0;padding:6px;text-align:left;font-size:14px}
.muted{color:#64748b}
#msg{margin-top:10px;color:#b91c1c}
</style>
<header><a href="/dashboard">AGRO-X Control</a><span>{{USER}}</span></header>
<main>
<h2>{{TITLE}}</h2>
{{BODY}}
<div id="msg"></div>
</main>
<script>
const L = {{LABELS}};
async function api(url, opts){
  opts = opts || {};
  const r = await fetch(url, Object.assign({credentials:'same-origin'}, opts));
  const j = await r.json().catch(()=>null);
  if(!r.ok){ say((j && (j.detail || j.error)) || L.error); throw j; }
  return j;
}
function jsonPost(url, body){ return api(url, {method:'POST', headers:{'Content-Type':'application/json'}, body:JSON.stringify(body)}); }
function say(text){ document.getElementById('msg').textContent = text; }
// API values only ever reach the page through textContent
function el(tag, text){ const e = document.createElement(tag); if(text != null) e.textContent = String(text); return e; }
function button(label, fn){ const b = el('button', label); b.type = 'button'; b.onclick = fn; return b; }
function cell(r, c){ const v = typeof c === 'function' ? c(r) : r[c]; return v == null ? '' : v; }
function fill(id, rows, cols, heads, actions){
  const t = document.getElementById(id);
  t.replaceChildren();
  const hr = el('tr');
  (heads || cols).forEach(h=>hr.appendChild(el('th', h)));
  if(actions) hr.appendChild(el('th'));
  t.appendChild(hr);
  rows.forEach(r=>{
    const tr = el('tr');
    cols.forEach(c=>tr.appendChild(el('td', cell(r, c))));
    if(actions){ const td = el('td'); actions(r).forEach(b=>td.appendChild(b)); tr.appendChild(td); }
    t.appendChild(tr);
  });
}
function opt(sel, rows, label){ rows.forEach(r=>{ const o = el('option', r[label || 'name']); o.value = r.id; sel.appendChild(o); }); }
</script>
{{SCRIPT}}
</html>"""

BASE_LABELS = ("error", "saved")
PHOTO_ACCEPT = "image/jpeg,image/png,image/webp"


def _labels(keys, lang: str) -> str:
    table = {k: translate(k, lang) for k in BASE_LABELS + tuple(keys)}
    return json.dumps(table, ensure_ascii=False).replace("</", "<\\/")


def _page(
    request: Request,
    title_key: str,
    body: str,
    script: str = "",
    user: Optional[SessionUser] = None,
    labels=(),
) -> HTMLResponse:
    lang = get_request_language(request)
    content = (
        SHELL.replace("{{LANG}}", lang)
        .replace("{{TITLE}}", _html.escape(translate(title_key, lang)))
        .replace("{{USER}}", _html.escape((user.email or "") if user else ""))
        .replace("{{LABELS}}", _labels(labels, lang))
        .replace("{{BODY}}", body)
        .replace("{{SCRIPT}}", f"<script>{script}</script>" if script else "")
    )
    return HTMLResponse(content=content)


def _t(lang: str):
    return lambda key: _html.escape(translate(key, lang))


# ---------- PUBLIC ----------

@router.get("/", response_class=HTMLResponse)
def language_select(request: Request):
    body = """
<div class="grid">
  <a class="tile" href="/language/pt">Português</a>
  <a class="tile" href="/language/en">English</a>
</div>"""
    return _page(request, "selectLanguage", body)


@router.get("/language/{lang}")
def set_language(lang: str):
    response = RedirectResponse(url="/login", status_code=303)
    response.set_cookie(LANGUAGE_COOKIE, normalize_language(lang), max_age=60 * 60 * 24 * 365, samesite="lax")
    return response


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    t = _t(get_request_language(request))
    body = f"""
<form id="login">
  <label>{t('email')}</label><input id="email" type="email" required>
  <label>{t('password')}</label><input id="pw" type="password" required>
  <button>{t('login')}</button>
</form>
<h3>{t('signup')}</h3>
<form id="signup">
  <label>{t('firstName')}</label><input id="first">
  <label>{t('lastName')}</label><input id="last">
  <label>{t('email')}</label><input id="semail" type="email" required>
  <label>{t('password')}</label><input id="spw" type="password" required>
  <label>{t('confirmPassword')}</label><input id="spw2" type="password" required>
  <button>{t('signup')}</button>
</form>"""
    script = """
document.getElementById('login').onsubmit = async (ev)=>{ ev.preventDefault();
  await jsonPost('/auth/login', {email:email.value, password:pw.value}); location.href='/dashboard'; };
document.getElementById('signup').onsubmit = async (ev)=>{ ev.preventDefault();
  await jsonPost('/auth/signup', {email:semail.value, password:spw.value, confirm_password:spw2.value, first_name:first.value, last_name:last.value});
  say(L.success); };
"""
    return _page(request, "login", body, script, labels=("success",))


# ---------- SIGNED-IN ----------

@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(request: Request, user: SessionUser = Depends(session_guard), db: Session = Depends(get_db)):
    lang = get_request_language(request)
    t = _t(lang)
    summary = user_summary(db, user.id, user.email, lang)
    tiles = "".join(
        f'<a class="tile" href="{tile["path"]}">{_html.escape(tile["title"])}</a>' for tile in summary["tiles"]
    )
    links = []
    if summary["is_admin"]:
        links += [("/admin/machines", "machines"), ("/admin/master-data", "masterData"), ("/admin/users", "users")]
    if summary["is_super_admin"]:
        links += [("/super-admin", "superAdmin"), ("/admin/roles-audit", "rolesAudit")]
    extra = " · ".join(f'<a href="{path}">{t(key)}</a>' for path, key in links)
    body = f"""
<p class="muted">{t('welcomeBack')}, {_html.escape(summary['name'])}</p>
<div class="grid">{tiles}</div>
<p>{extra}</p>
<button onclick="logout()">{t('logout')}</button>"""
    script = "async function logout(){ await jsonPost('/auth/logout', {}); location.href='/login'; }"
    return _page(request, "dashboard", body, script, user)


GPS_AND_UPLOAD_JS = """
let gps = null;
function captureGps(){ navigator.geolocation.getCurrentPosition(p=>{ gps={lat:p.coords.latitude, lng:p.coords.longitude}; document.getElementById('gps').textContent=gps.lat.toFixed(5)+', '+gps.lng.toFixed(5); }); }
async function upload(input, prefix){ if(!input.files.length) return null; const fd=new FormData(); fd.append('prefix', prefix); fd.append('file', input.files[0]); return (await api('/activities/photos', {method:'POST', body:fd})).path; }
"""


@router.get("/activity", response_class=HTMLResponse)
def activity_page(request: Request, user: SessionUser = Depends(session_guard), db: Session = Depends(get_db)):
    if activity_svc.get_open_activity(db, user.id) is not None:
        return RedirectResponse(url="/activity/close", status_code=303)
    t = _t(get_request_language(request))
    body = f"""
<form id="start">
  <label>{t('selectMachine')}</label><select id="machine" required></select>
  <label>{t('client')}</label><select id="client"><option value=""></option></select>
  <label>{t('location')}</label><select id="loc"><option value=""></option></select>
  <label>{t('service')}</label><select id="service"><option value=""></option></select>
  <label>{t('odometer')}</label><input id="odo" type="number" step="any" required>
  <label>{t('takeSelfie')}</label><input id="selfie" type="file" accept="{PHOTO_ACCEPT}" capture="user">
  <label>{t('odometerPhoto')}</label><input id="odophoto" type="file" accept="{PHOTO_ACCEPT}" capture="environment">
  <label>{t('notes')}</label><textarea id="notes"></textarea>
  <button type="button" onclick="captureGps()">{t('location')}</button> <span id="gps" class="muted"></span>
  <br><button>{t('startActivity')}</button>
</form>"""
    script = GPS_AND_UPLOAD_JS + """
api('/activities/options').then(o=>{ opt(machine, o.machines, 'label'); opt(client, o.clients); opt(service, o.services); });
client.onchange = ()=>{ loc.replaceChildren(el('option')); if(client.value) api('/activities/locations?client_id='+encodeURIComponent(client.value)).then(r=>opt(loc, r)); };
document.getElementById('start').onsubmit = async (ev)=>{ ev.preventDefault();
  const body = {machine_id:machine.value||null, start_odometer:odo.value===''?null:Number(odo.value), start_gps:gps,
    client_id:client.value||null, location_id:loc.value||null, service_id:service.value||null, notes:notes.value};
  body.start_photo_path = await upload(selfie, 'start');
  body.start_odometer_photo_path = await upload(odophoto, 'start-odometer');
  await jsonPost('/activities/start', body); location.href='/activity/close'; };
"""
    return _page(request, "activityRecord", body, script, user)


@router.get("/activity/close", response_class=HTMLResponse)
def close_activity_page(request: Request, user: SessionUser = Depends(session_guard), db: Session = Depends(get_db)):
    activity = activity_svc.get_open_activity(db, user.id)
    if activity is None:
        return RedirectResponse(url="/activity", status_code=303)
    details = activity_svc.open_activity_details(db, activity)
    t = _t(get_request_language(request))
    context = " ".join(_html.escape(details[k] or "") for k in ("client_name", "location_name", "service_name"))
    ratings = "".join(f'<option value="{i}">{i}</option>' for i in range(1, 6))
    body = f"""
<p>{_html.escape(details['machine_label'])} <span class="muted">{context}</span></p>
<p class="muted">{details['elapsed']}</p>
<form id="close">
  <label>{t('odometer')}</label><input id="odo" type="number" step="any">
  <label>{t('rating')}</label><select id="rating"><option value=""></option>{ratings}</select>
  <label>{t('area')}</label><input id="area" type="number" step="any"><input id="unit" value="ha">
  <label>{t('areaNotes')}</label><input id="areanotes">
  <label>{t('notes')}</label><textarea id="notes">{_html.escape(activity.notes or '')}</textarea>
  <label>{t('takeSelfie')}</label><input id="selfie" type="file" accept="{PHOTO_ACCEPT}" capture="user">
  <label>{t('odometerPhoto')}</label><input id="odophoto" type="file" accept="{PHOTO_ACCEPT}" capture="environment">
  <button type="button" onclick="captureGps()">{t('location')}</button> <span id="gps" class="muted"></span>
  <br><button>{t('endActivity')}</button>
</form>"""
    script = GPS_AND_UPLOAD_JS + """
document.getElementById('close').onsubmit = async (ev)=>{ ev.preventDefault();
  const body = {end_odometer:odo.value===''?null:Number(odo.value), end_gps:gps, performance_rating:rating.value?Number(rating.value):null,
    area_value:area.value===''?null:Number(area.value), area_unit:unit.value, area_notes:areanotes.value, notes:notes.value};
  body.end_photo_path = await upload(selfie, 'end');
  body.end_odometer_photo_path = await upload(odophoto, 'end-odometer');
  await jsonPost('/activities/close', body); location.href='/dashboard'; };
"""
    return _page(request, "endActivity", body, script, user)


def _coming_soon(title_key: str):
    def _view(request: Request, user: SessionUser = Depends(session_guard)):
        t = _t(get_request_language(request))
        return _page(request, title_key, f'<p class="muted">{t("comingSoon")}</p>', user=user)

    return _view


for _path, _key in (
    ("/maintenance", "maintenance"),
    ("/damages", "damages"),
    ("/fuel", "fuel"),
    ("/orders", "orders"),
    ("/support", "support"),
):
    router.add_api_route(_path, _coming_soon(_key), methods=["GET"], response_class=HTMLResponse)


@router.get("/my-documents", response_class=HTMLResponse)
def my_documents_page(request: Request, user: SessionUser = Depends(session_guard)):
    t = _t(get_request_language(request))
    body = f"""
<form id="compliance">
  <label>NIF</label><input id="nif" autocomplete="off">
  <label>NISS</label><input id="niss" autocomplete="off">
  <label>IBAN</label><input id="iban" autocomplete="off">
  <label>{t('address')}</label><input id="address_line1"><input id="address_line2">
  <label>{t('city')}</label><input id="city">
  <label>{t('postalCode')}</label><input id="postal_code">
  <label>{t('country')}</label><input id="country">
  <button>{t('save')}</button>
</form>
<p>{t('status')}: <b id="status"></b> <span id="review" class="muted"></span></p>
<table id="docs"></table>
<label>{t('documentType')}</label><select id="doctype"></select>
<input id="file" type="file" accept="application/pdf,{PHOTO_ACCEPT}">
<button onclick="uploadDoc()">{t('upload')}</button> <button onclick="removeDoc()">{t('remove')}</button>
<button onclick="submitDocs()">{t('submitForApproval')}</button>"""
    script = """
const TYPES = ['CC','PASSPORT','RESIDENCE_TITLE','AIMA_APPOINTMENT_PROOF','NISS_PROOF','NIF_PROOF','IBAN_PROOF','ADDRESS_PROOF'];
TYPES.forEach(t=>{ const o = el('option', t); o.value = t; doctype.appendChild(o); });
async function load(){
  const d = await api('/documents/me');
  ['nif','niss','iban'].forEach(f=>{ const e = document.getElementById(f); const tail = d.compliance[f+'_last4']; e.value = ''; e.placeholder = tail ? '\\u2022\\u2022\\u2022\\u2022' + tail : ''; });
  ['address_line1','address_line2','city','postal_code','country'].forEach(f=>{ document.getElementById(f).value = d.compliance[f] || ''; });
  status.textContent = (d.verification && d.verification.status) || '-';
  review.textContent = (d.verification && d.verification.review_notes) || '';
  fill('docs', d.documents, ['doc_type','file_name','size_bytes','created_at'], [L.documentType, L.fileName, L.size, L.date]);
}
document.getElementById('compliance').onsubmit = async (ev)=>{ ev.preventDefault();
  const body = {}; ['nif','niss','iban','address_line1','address_line2','city','postal_code','country'].forEach(f=>{ body[f] = document.getElementById(f).value; });
  await jsonPost('/functions/v1/compliance-upsert', body); say(L.saved); await load(); };
async function uploadDoc(){ if(!file.files.length) return; const fd = new FormData(); fd.append('file', file.files[0]); await api('/documents/'+encodeURIComponent(doctype.value), {method:'POST', body:fd}); await load(); }
async function removeDoc(){ await api('/documents/'+encodeURIComponent(doctype.value), {method:'DELETE'}); await load(); }
async function submitDocs(){ await jsonPost('/documents/submit', {}); await load(); }
load();
"""
    return _page(request, "myDocuments", body, script, user, labels=("documentType", "fileName", "size", "date"))


# ---------- ADMIN ----------

@router.get("/admin/activities", response_class=HTMLResponse)
def admin_activities_page(request: Request, user: SessionUser = Depends(admin_guard)):
    body = '<table id="rows"></table>'
    script = """
async function load(){
  const rows = await api('/validation/pending');
  fill('rows', rows,
    ['operator_name', 'machine_name', 'client_name', 'location_name', 'service_name', r=>r.activity.start_time],
    [L.operator, L.machine, L.client, L.location, L.service, L.startTime],
    r=>[button(L.photos, ()=>photos(r.activity.id)), button(L.approve, ()=>review(r.activity.id, 'APPROVED')), button(L.reject, ()=>review(r.activity.id, 'REJECTED'))]);
}
async function review(id, status){ await jsonPost('/validation/'+encodeURIComponent(id)+'/review', {status:status}); await load(); }
async function photos(id){ const p = await api('/activities/'+encodeURIComponent(id)+'/photos'); Object.values(p).filter(Boolean).forEach(u=>window.open(u, '_blank', 'noopener')); }
load();
"""
    labels = ("operator", "machine", "client", "location", "service", "startTime", "photos", "approve", "reject")
    return _page(request, "activityValidation", body, script, user, labels=labels)


MACHINE_FIELDS = (
    ("internal_id", "internalId"),
    ("brand", "brand"),
    ("name", "name"),
    ("model", "model"),
    ("plate", "plate"),
    ("serial_number", "serialNumber"),
)


@router.get("/admin/machines", response_class=HTMLResponse)
def admin_machines_page(request: Request, user: SessionUser = Depends(admin_guard)):
    t = _t(get_request_language(request))
    inputs = "".join(f'<label>{t(key)}</label><input id="{field}">' for field, key in MACHINE_FIELDS)
    body = f"""
<form id="create">{inputs}
  <label>{t('status')}</label><select id="status"><option>ACTIVE</option><option>MAINTENANCE</option><option>INACTIVE</option></select>
  <button>{t('save')}</button>
</form>
<table id="rows"></table>"""
    script = """
const FIELDS = %s;
const KEYS = %s;
async function load(){
  fill('rows', await api('/machines'), FIELDS.concat(['status']), FIELDS.map(f=>L[KEYS[f]]).concat([L.status]),
    r=>[button(L.remove, async ()=>{ await api('/machines/'+encodeURIComponent(r.id), {method:'DELETE'}); await load(); })]);
}
document.getElementById('create').onsubmit = async (ev)=>{ ev.preventDefault();
  const body = {status: status.value}; FIELDS.forEach(f=>{ body[f] = document.getElementById(f).value; });
  await jsonPost('/machines', body); await load(); };
load();
""" % (json.dumps([field for field, _ in MACHINE_FIELDS]), json.dumps(dict(MACHINE_FIELDS)))
    labels = ("status", "remove") + tuple(key for _, key in MACHINE_FIELDS)
    return _page(request, "machines", body, script, user, labels=labels)


@router.get("/admin/master-data", response_class=HTMLResponse)
def admin_master_data_page(request: Request, user: SessionUser = Depends(admin_guard)):
    t = _t(get_request_language(request))
    body = f"""
<h3>{t('clients')}</h3><input id="cname"><button onclick="add('clients', {{name:cname.value}})">+</button><table id="clients"></table>
<h3>{t('locations')}</h3><select id="lclient"></select><input id="lname"><button onclick="add('locations', {{client_id:lclient.value, name:lname.value}})">+</button><table id="locations"></table>
<h3>{t('services')}</h3><input id="sname"><button onclick="add('services', {{name:sname.value}})">+</button><table id="services"></table>"""
    script = """
function del(kind){ return r=>[button(L.remove, async ()=>{ await api('/master-data/'+kind+'/'+encodeURIComponent(r.id), {method:'DELETE'}); await load(); })]; }
async function load(){
  const c = await api('/master-data/clients');
  fill('clients', c, ['name'], [L.name], del('clients'));
  lclient.replaceChildren(); opt(lclient, c);
  fill('locations', await api('/master-data/locations'), ['client_name', 'name'], [L.client, L.name], del('locations'));
  fill('services', await api('/master-data/services'), ['name'], [L.name], del('services'));
}
async function add(kind, body){ await jsonPost('/master-data/'+kind, body); await load(); }
load();
"""
    return _page(request, "masterData", body, script, user, labels=("name", "client", "remove"))


@router.get("/admin/users", response_class=HTMLResponse)
def admin_users_page(request: Request, user: SessionUser = Depends(admin_guard)):
    t = _t(get_request_language(request))
    body = f"""
<form id="assign">
  <label>{t('email')}</label><input id="email" type="email" maxlength="320" required>
  <label>{t('role')}</label><select id="role"><option>OPERADOR</option><option>COORDENADOR</option><option>ADMIN</option><option>SUPER_ADMIN</option></select>
  <button>{t('save')}</button> <button type="button" onclick="removeRole()">{t('remove')}</button>
</form>"""
    script = """
document.getElementById('assign').onsubmit = async (ev)=>{ ev.preventDefault();
  await jsonPost('/roles', {email:email.value.trim(), role:role.value}); say(L.saved); };
async function removeRole(){ await jsonPost('/roles/remove', {email:email.value.trim()}); say(L.saved); }
"""
    return _page(request, "users", body, script, user)


@router.get("/admin/approvals", response_class=HTMLResponse)
def admin_approvals_page(request: Request, user: SessionUser = Depends(coordinator_guard)):
    t = _t(get_request_language(request))
    body = f"""
<table id="rows"></table>
<div id="detail"></div>
<label>{t('notes')}</label><textarea id="notes"></textarea>"""
    script = """
let current = null;
async function load(){
  fill('rows', await api('/approvals'), ['name', 'email', 'submitted_at'], [L.name, L.email, L.submittedAt],
    r=>[button(L.open, ()=>openUser(r.user_id))]);
}
function masked(c, f){ return f.toUpperCase() + ' ' + (c[f+'_last4'] ? '\\u2022\\u2022\\u2022\\u2022' + c[f+'_last4'] : '-'); }
async function openUser(id){
  current = id;
  const d = await api('/approvals/'+encodeURIComponent(id));
  const box = document.getElementById('detail');
  box.replaceChildren(el('p', ['nif', 'niss', 'iban'].map(f=>masked(d.compliance, f)).join('  ')));
  d.documents.forEach(x=>box.appendChild(button(x.doc_type, ()=>view(x.doc_type))));
  box.appendChild(el('br'));
  box.appendChild(button(L.approve, ()=>decide('APPROVED')));
  box.appendChild(button(L.reject, ()=>decide('REJECTED')));
}
async function view(docType){ const r = await api('/approvals/'+encodeURIComponent(current)+'/documents/'+encodeURIComponent(docType)+'/url'); window.open(r.url, '_blank', 'noopener'); }
async function decide(status){ await jsonPost('/approvals/'+encodeURIComponent(current)+'/decision', {status:status, notes:notes.value}); document.getElementById('detail').replaceChildren(); await load(); }
load();
"""
    labels = ("name", "email", "submittedAt", "open", "approve", "reject")
    return _page(request, "approvals", body, script, user, labels=labels)


# ---------- SUPER ADMIN ----------

@router.get("/admin/roles-audit", response_class=HTMLResponse)
def roles_audit_page(request: Request, user: SessionUser = Depends(super_admin_guard)):
    t = _t(get_request_language(request))
    body = f'<input id="filter" placeholder="{t("email")}"><button onclick="load()">{t("filter")}</button><table id="rows"></table>'
    script = """
async function load(){
  fill('rows', await api('/roles/audit?email='+encodeURIComponent(filter.value)),
    ['created_at', 'target_email', 'role', 'actor_email'], [L.date, L.email, L.role, L.grantedBy]);
}
load();
"""
    return _page(request, "rolesAudit", body, script, user, labels=("date", "email", "role", "grantedBy"))


@router.get("/super-admin", response_class=HTMLResponse)
def super_admin_page(request: Request, user: SessionUser = Depends(super_admin_guard)):
    body = '<pre id="stats"></pre>'
    script = "api('/stats/super-admin').then(s=>{ document.getElementById('stats').textContent = JSON.stringify(s, null, 2); });"
    return _page(request, "superAdmin", body, script, user)
