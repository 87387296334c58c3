from .client_factory import (
    BaseRepositoryClient, GitHubClient, RepositoryClientFactory,
    RemoteFile, CommitResult, BranchResult, PullRequestResult,
)

__all__ = [
    'BaseRepositoryClient', 'GitHubClient', 'RepositoryClientFactory',
    'RemoteFile', 'CommitResult', 'BranchResult', 'PullRequestResult',
]
