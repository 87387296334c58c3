"""
Remote repository abstraction. Moves file bytes and branch/PR metadata;
knows nothing about decision tables.
"""
import base64
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from ..errors import ConflictError, NotFoundError, RemoteError

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR = {'name': 'Decision Table Manager', 'email': 'decision-tables@example.com'}
_GITHUB_TIMEOUT = httpx.Timeout(connect=10.0, read=30.0, write=30.0, pool=30.0)


@dataclass
class RemoteFile:
    path: str
    content: bytes
    sha: str
    size: int

    def to_dict(self) -> Dict:
        return {
            'path': self.path,
            'content': base64.b64encode(self.content).decode('ascii'),
            'sha': self.sha,
            'size': self.size,
        }


@dataclass
class CommitResult:
    commit_sha: str
    branch: str
    html_url: Optional[str] = None
    content_sha: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            'commitSha': self.commit_sha,
            'branch': self.branch,
            'htmlUrl': self.html_url,
            'contentSha': self.content_sha,
            'status': 'success',
        }


@dataclass
class BranchResult:
    branch_name: str
    sha: str

    def to_dict(self) -> Dict:
        return {'branchName': self.branch_name, 'sha': self.sha, 'status': 'success'}


@dataclass
class PullRequestResult:
    number: int
    html_url: str

    def to_dict(self) -> Dict:
        return {'prNumber': self.number, 'prUrl': self.html_url, 'status': 'success'}


class BaseRepositoryClient(ABC):
    @abstractmethod
    def fetch_file(self, owner: str, repo: str, path: str, ref: str = 'main') -> RemoteFile:
        """Return the file's bytes and content hash at ``ref``."""
        ...

    @abstractmethod
    def commit_file(self, owner: str, repo: str, path: str, content: bytes, message: str,
                    branch: str, author: Optional[Dict] = None,
                    expected_sha: Optional[str] = None) -> CommitResult:
        """
        Create or update the file on ``branch``, creating the branch if needed.
        With ``expected_sha`` the write only succeeds while the file still has that sha.
        """
        ...

    @abstractmethod
    def create_branch(self, owner: str, repo: str, new_branch: str,
                      from_branch: str = 'main') -> BranchResult:
        ...

    @abstractmethod
    def create_pull_request(self, owner: str, repo: str, title: str, body: str,
                            head: str, base: str) -> PullRequestResult:
        ...


class GitHubClient(BaseRepositoryClient):
    """GitHub REST API client over httpx. A token is optional for public reads."""

    def __init__(self, token: Optional[str] = None, base_url: Optional[str] = None,
                 client: Optional[httpx.Client] = None):
        self.token = token or os.environ.get('GITHUB_TOKEN')
        self.base_url = (base_url or os.environ.get('GITHUB_API_URL') or 'https://api.github.com').rstrip('/')
        self._client = client

    def _headers(self) -> Dict[str, str]:
        headers = {
            'Accept': 'application/vnd.github+json',
            'User-Agent': 'decision-table-manager',
        }
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f'{self.base_url}{path}'
        try:
            if self._client is not None:
                response = self._client.request(method, url, headers=self._headers(), **kwargs)
            else:
                with httpx.Client(timeout=_GITHUB_TIMEOUT) as client:
                    response = client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"GitHub request {method} {path} failed: {e}")
            raise RemoteError(f"GitHub request failed: {e}") from e

        if response.status_code >= 400:
            _raise_for_status(response, f'{method} {path}')
        if response.status_code == 204 or not response.content:
            return {}
        return response.json()

    @staticmethod
    def _repo_path(owner: str, repo: str) -> str:
        return f'/repos/{quote(owner, safe="")}/{quote(repo, safe="")}'

    def _contents_path(self, owner: str, repo: str, path: str) -> str:
        return f'{self._repo_path(owner, repo)}/contents/{quote(path.lstrip("/"), safe="/")}'

    def _branch_head(self, owner: str, repo: str, branch: str) -> str:
        data = self._request('GET', f'{self._repo_path(owner, repo)}/git/ref/heads/{quote(branch, safe="/")}')
        return data['object']['sha']

    def fetch_file(self, owner: str, repo: str, path: str, ref: str = 'main') -> RemoteFile:
        logger.info(f"Fetching file from GitHub: {owner}/{repo}/{path} (ref: {ref})")
        try:
            data = self._request('GET', self._contents_path(owner, repo, path), params={'ref': ref})
        except NotFoundError:
            raise NotFoundError(f"File not found: {owner}/{repo}/{path}")

        if not isinstance(data, dict) or data.get('type') != 'file':
            raise RemoteError("The specified path is not a file")

        content = base64.b64decode(data.get('content') or '')
        return RemoteFile(path=path, content=content, sha=data['sha'], size=data.get('size', len(content)))

    def _existing_sha(self, owner: str, repo: str, path: str, branch: str) -> Optional[str]:
        try:
            data = self._request('GET', self._contents_path(owner, repo, path), params={'ref': branch})
        except NotFoundError:
            return None
        return data.get('sha') if isinstance(data, dict) else None

    def _ensure_branch(self, owner: str, repo: str, branch: str):
        try:
            self._branch_head(owner, repo, branch)
        except NotFoundError:
            logger.info(f"Branch {branch} does not exist, will create it")
            default_branch = self._request('GET', self._repo_path(owner, repo))['default_branch']
            self.create_branch(owner, repo, branch, default_branch)

    def commit_file(self, owner: str, repo: str, path: str, content: bytes, message: str,
                    branch: str, author: Optional[Dict] = None,
                    expected_sha: Optional[str] = None) -> CommitResult:
        logger.info(f"Committing file to GitHub: {owner}/{repo}/{path} on branch {branch}")
        self._ensure_branch(owner, repo, branch)

        identity = {
            'name': (author or {}).get('name') or DEFAULT_AUTHOR['name'],
            'email': (author or {}).get('email') or DEFAULT_AUTHOR['email'],
        }
        body = {
            'message': message,
            'content': base64.b64encode(content).decode('ascii'),
            'branch': branch,
            'committer': identity,
            'author': identity,
        }
        # GitHub answers 409 when the file no longer has this sha
        sha = expected_sha or self._existing_sha(owner, repo, path, branch)
        if sha:
            body['sha'] = sha

        try:
            data = self._request('PUT', self._contents_path(owner, repo, path), json=body)
        except ConflictError:
            raise ConflictError(f"{path} changed on {branch} since it was fetched; pull before committing")
        commit = data.get('commit', {})
        logger.info(f"File committed successfully: {commit.get('sha')}")
        return CommitResult(
            commit_sha=commit.get('sha', ''),
            branch=branch,
            html_url=commit.get('html_url'),
            content_sha=(data.get('content') or {}).get('sha'),
        )

    def create_branch(self, owner: str, repo: str, new_branch: str,
                      from_branch: str = 'main') -> BranchResult:
        logger.info(f"Creating branch on GitHub: {owner}/{repo}/{new_branch} from {from_branch}")
        source_sha = self._branch_head(owner, repo, from_branch)
        try:
            data = self._request('POST', f'{self._repo_path(owner, repo)}/git/refs',
                                 json={'ref': f'refs/heads/{new_branch}', 'sha': source_sha})
        except ConflictError:
            raise ConflictError(f"Branch {new_branch} already exists")
        return BranchResult(branch_name=new_branch, sha=data.get('object', {}).get('sha', source_sha))

    def create_pull_request(self, owner: str, repo: str, title: str, body: str,
                            head: str, base: str) -> PullRequestResult:
        logger.info(f"Creating PR on GitHub: {owner}/{repo} from {head} to {base}")
        try:
            data = self._request('POST', f'{self._repo_path(owner, repo)}/pulls',
                                 json={'title': title, 'body': body, 'head': head, 'base': base})
        except ConflictError:
            raise ConflictError("A pull request already exists for this branch or validation failed")
        logger.info(f"PR created successfully: #{data['number']}")
        return PullRequestResult(number=data['number'], html_url=data['html_url'])


def _raise_for_status(response: httpx.Response, what: str):
    try:
        detail = response.json().get('message', '')
    except ValueError:
        detail = response.text
    message = f"{what} returned {response.status_code}: {detail}".strip()

    if response.status_code == 404:
        raise NotFoundError(message)
    if response.status_code in (409, 422):
        raise ConflictError(message)
    logger.error(f"GitHub error: {message}")
    raise RemoteError(message)


class RepositoryClientFactory:
    SUPPORTED_PROVIDERS = {
        'github': {
            'class': GitHubClient,
            'base_url': 'https://api.github.com',
        },
    }

    @staticmethod
    def get_client(provider: str = 'github', token: Optional[str] = None,
                   client: Optional[httpx.Client] = None) -> BaseRepositoryClient:
        provider = (provider or 'github').lower()
        if provider not in RepositoryClientFactory.SUPPORTED_PROVIDERS:
            raise ValueError(f"Unsupported provider '{provider}'. Supported: {list(RepositoryClientFactory.SUPPORTED_PROVIDERS)}")
        cfg = RepositoryClientFactory.SUPPORTED_PROVIDERS[provider]
        return cfg['class'](token=token, client=client)

    @staticmethod
    def list_providers() -> dict:
        return {name: {'base_url': cfg['base_url']} for name, cfg in RepositoryClientFactory.SUPPORTED_PROVIDERS.items()}
