"""
Flask Blueprint for the remote repository: fetch, commit, branch, pull request,
and opening/pulling a remote table into an editing session.
Registers all /api/git/* endpoints.
"""
import base64
import binascii
import logging
from typing import Dict, List, Optional

from flask import Blueprint, jsonify, request

from extensions import limiter

from . import session_store
from .editing_session import EditingSession, RepoInfo
from .remote_repo import BaseRepositoryClient, RepositoryClientFactory
from .responses import error_json, register_error_handlers, timestamp
from .table_codec import parse_table_bytes, serialize_table

logger = logging.getLogger(__name__)

git_bp = Blueprint('git', __name__, url_prefix='/api/git')
register_error_handlers(git_bp)


def _get_repo_client(token: Optional[str]) -> BaseRepositoryClient:
    provider = request.headers.get('X-Repo-Provider', 'github')
    return RepositoryClientFactory.get_client(provider, token or None)


def _missing(body: Dict, keys: List[str]) -> List[str]:
    return [k for k in keys if not body.get(k)]


def _validation_error(missing: List[str]):
    return error_json('Validation Error', f"Missing required field(s): {', '.join(missing)}", 400)


@git_bp.route('/fetch-file', methods=['GET'])
@limiter.limit("30 per minute")
def fetch_file():
    """Fetch a file's raw content (base64) and sha."""
    args = request.args
    missing = _missing(args, ['repoOwner', 'repoName', 'filePath'])
    if missing:
        return _validation_error(missing)

    client = _get_repo_client(args.get('token'))
    remote = client.fetch_file(args['repoOwner'], args['repoName'], args['filePath'],
                               args.get('branch') or 'main')
    logger.info(f"File fetched successfully from {args['repoOwner']}/{args['repoName']}/{args['filePath']}")
    return jsonify({'message': 'File fetched successfully', **remote.to_dict(), 'timestamp': timestamp()})


@git_bp.route('/open', methods=['POST'])
@limiter.limit("30 per minute")
def open_remote():
    """Fetch a decision table from the repository and open an editing session on it."""
    body = request.get_json(silent=True) or {}
    missing = _missing(body, ['repoOwner', 'repoName', 'filePath'])
    if missing:
        return _validation_error(missing)

    repo_info = RepoInfo(
        owner=body['repoOwner'],
        repo=body['repoName'],
        path=body['filePath'],
        branch=body.get('branch') or 'main',
        token=body.get('token'),
    )
    remote = _get_repo_client(repo_info.token).fetch_file(
        repo_info.owner, repo_info.repo, repo_info.path, repo_info.branch)
    doc = parse_table_bytes(remote.content)
    session = EditingSession(doc, repo_info=repo_info, remote_sha=remote.sha)
    session_id = session_store.create_session(session)
    return jsonify({'session_id': session_id, **session.to_dict()})


@git_bp.route('/session/<session_id>/pull', methods=['POST'])
@limiter.limit("30 per minute")
def pull_remote(session_id):
    """
    Fetch the latest remote version and diff it against the session's table.
    The session's table is left untouched until /api/tables/session/<id>/resolve.
    """
    session = session_store.get_session(session_id)
    if session is None:
        return error_json('Not Found', 'Session expired or not found', 404)
    info = session.repo_info
    if info is None:
        return error_json('Validation Error', 'Session is not linked to a repository', 400)

    body = request.get_json(silent=True) or {}
    branch = body.get('branch') or info.branch
    remote = _get_repo_client(body.get('token') or info.token).fetch_file(
        info.owner, info.repo, info.path, branch)
    pulled = parse_table_bytes(remote.content)

    source = {'kind': 'remote', 'branch': branch}
    if branch == info.branch:
        source['sha'] = remote.sha
    pending = session.review_pull(pulled, source=source)
    session_store.add_pending_pull(session_id, pending)
    return jsonify({**pending.to_dict(), 'hasLocalChanges': session.has_unsaved_changes})


@git_bp.route('/commit-file', methods=['POST'])
@limiter.limit("20 per minute")
def commit_file():
    """
    Commit a workbook. Content comes either from a session (serialized on the fly)
    or from a base64 'content' field.
    """
    body = request.get_json(silent=True) or {}
    session_id = body.get('session_id')
    session = None
    if session_id:
        session = session_store.get_session(session_id)
        if session is None:
            return error_json('Not Found', 'Session expired or not found', 404)

    info = session.repo_info if session else None
    owner = body.get('repoOwner') or (info.owner if info else None)
    repo = body.get('repoName') or (info.repo if info else None)
    path = body.get('filePath') or (info.path if info else None)
    branch = body.get('branch') or (info.branch if info else None)
    token = body.get('token') or (info.token if info else None)

    missing = [name for name, value in (('repoOwner', owner), ('repoName', repo), ('filePath', path),
                                        ('branch', branch), ('message', body.get('message')))
               if not value]
    if missing:
        return _validation_error(missing)

    if session is not None:
        content = serialize_table(session.document)
    elif body.get('content'):
        try:
            content = base64.b64decode(body['content'], validate=True)
        except (binascii.Error, ValueError):
            return error_json('Validation Error', "'content' must be base64 encoded", 400)
    else:
        return _validation_error(['content or session_id'])

    # the sha the session last saw is only meaningful for the file it was opened from
    expected_sha = body.get('sha')
    if not expected_sha and session is not None and info is not None \
            and (owner, repo, path, branch) == (info.owner, info.repo, info.path, info.branch):
        expected_sha = session.remote_sha

    result = _get_repo_client(token).commit_file(
        owner, repo, path, content, body['message'], branch, body.get('author'),
        expected_sha=expected_sha)
    if session is not None:
        session.mark_saved(remote_sha=result.content_sha)

    logger.info(f"File committed successfully to {owner}/{repo}/{path}")
    return jsonify({'message': 'File committed successfully', **result.to_dict(), 'timestamp': timestamp()})


@git_bp.route('/create-branch', methods=['POST'])
@limiter.limit("20 per minute")
def create_branch():
    body = request.get_json(silent=True) or {}
    missing = _missing(body, ['repoOwner', 'repoName', 'newBranch'])
    if missing:
        return _validation_error(missing)

    result = _get_repo_client(body.get('token')).create_branch(
        body['repoOwner'], body['repoName'], body['newBranch'], body.get('fromBranch') or 'main')
    return jsonify({'message': 'Branch created successfully', **result.to_dict(), 'timestamp': timestamp()})


@git_bp.route('/create-pr', methods=['POST'])
@limiter.limit("10 per minute")
def create_pr():
    body = request.get_json(silent=True) or {}
    missing = _missing(body, ['repoOwner', 'repoName', 'title', 'sourceBranch', 'targetBranch'])
    if missing:
        return _validation_error(missing)

    result = _get_repo_client(body.get('token')).create_pull_request(
        body['repoOwner'], body['repoName'], body['title'], body.get('description', ''),
        body['sourceBranch'], body['targetBranch'])
    return jsonify({'message': 'Pull request created successfully', **result.to_dict(), 'timestamp': timestamp()})


@git_bp.route('/providers', methods=['GET'])
def list_providers():
    return jsonify(RepositoryClientFactory.list_providers())
