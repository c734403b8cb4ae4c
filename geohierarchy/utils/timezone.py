import datetime
import pytz

IST = pytz.timezone("Asia/Kolkata")


def ist_time(*args):
    """log record timestamps rendered in IST"""
    utc_dt = datetime.datetime.now(pytz.utc)
    converted = utc_dt.astimezone(IST)
    return converted.timetuple()
