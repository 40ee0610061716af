from enum import Enum


class Keywords(str, Enum):
    SKIP_CI_MARKER = "[skip ci]"
    CODECOMMIT_SOURCE = "aws.codecommit"
    REPOSITORY_STATE_CHANGE = "CodeCommit Repository State Change"
    REFERENCE_CREATED = "referenceCreated"
    REFERENCE_UPDATED = "referenceUpdated"
