# Copyright 2026 The docker-gc Authors
# All Rights Reserved.
#
#    Licensed under the Apache License, Version 2.0 (the "License"); you may
#    not use this file except in compliance with the License. You may obtain
#    a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
#    WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
#    License for the specific language governing permissions and limitations
#    under the License.

"""
Time related utilities and helper functions.
"""

import calendar
import datetime

import iso8601
from oslo_utils import encodeutils
from oslo_utils import timeutils

# Docker reports "never" as the zero value of Go's time.Time
_ZERO_TIME_YEAR = 1


def parse_isotime(timestr):
    """Parse time from ISO 8601 format."""
    try:
        return iso8601.parse_date(timestr)
    except iso8601.ParseError as e:
        raise ValueError(encodeutils.exception_to_unicode(e))
    except TypeError as e:
        raise ValueError(encodeutils.exception_to_unicode(e))


def to_timestamp(value):
    """Convert a Docker time value to whole seconds since the epoch.

    Docker uses integers for list endpoints and RFC 3339 strings with
    nanosecond precision for inspect endpoints. Empty values and the zero
    time are returned as None.
    """
    if value is None or value == '':
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime.datetime):
        at = value
    else:
        at = parse_isotime(value)
    if at.year <= _ZERO_TIME_YEAR:
        return None
    return calendar.timegm(at.utctimetuple())


def now_ts():
    """Current time in seconds since the epoch, honouring test overrides."""
    return timeutils.utcnow_ts(microsecond=True)


def delta_seconds(seconds):
    """Render a duration in seconds the way the logs show it."""
    return str(datetime.timedelta(seconds=int(seconds)))
