from datetime import datetime, timezone


def utcnow() -> datetime:
    # naive UTC: SQLite drops tzinfo on read, so everything stored and compared stays naive
    return datetime.now(timezone.utc).replace(tzinfo=None)


def epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)
