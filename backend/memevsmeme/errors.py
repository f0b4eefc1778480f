from __future__ import annotations


class MemeNotFound(Exception):
    pass


class ChallengeNotFound(Exception):
    pass


class ChallengeClosed(Exception):
    """Challenge is inactive or past its end date."""


class IncompleteSubmission(ValueError):
    pass


class BattleNotFound(Exception):
    pass


class MemeNotInBattle(Exception):
    pass


class NotEnoughMemes(Exception):
    pass


class UploadRejected(ValueError):
    pass
