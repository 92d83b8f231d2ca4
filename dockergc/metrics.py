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
Best effort statsd metrics.

Metrics never influence reclamation: a missing or unreachable sink is
logged and ignored.
"""

from oslo_config import cfg
from oslo_log import log as logging
from oslo_utils import encodeutils
from oslo_utils import netutils
import statsd

from dockergc.i18n import _, _LW

LOG = logging.getLogger(__name__)

DEFAULT_STATSD_PORT = 8125

statsd_opts = [
    cfg.BoolOpt('enabled', default=True,
                help=_("Emit inventory gauges and deletion counters to "
                       "statsd.")),
    cfg.StrOpt('address', default='127.0.0.1:%d' % DEFAULT_STATSD_PORT,
               help=_("""
Address of the statsd daemon, as ``host:port``.

Metrics are sent over UDP; delivery is not guaranteed and an unreachable
daemon does not affect reclamation.

""")),
    cfg.StrOpt('namespace', default='dockergc',
               help=_("Prefix prepended to every metric name.")),
    cfg.FloatOpt('sample_rate', default=1.0, min=0.0, max=1.0,
                 help=_("Sample rate applied to counters.")),
]

CONF = cfg.CONF
CONF.register_opts(statsd_opts, group='statsd')


class Emitter(object):
    """Fire-and-forget counters and gauges."""

    def __init__(self, client=None, sample_rate=1.0):
        self.client = client
        self.sample_rate = sample_rate

    @classmethod
    def from_conf(cls):
        if not CONF.statsd.enabled:
            return cls()
        host, port = netutils.parse_host_port(
            CONF.statsd.address, default_port=DEFAULT_STATSD_PORT)
        try:
            client = statsd.StatsClient(host, port,
                                        prefix=CONF.statsd.namespace or None)
        except (OSError, ValueError) as e:
            LOG.warning(_LW("Unable to set up statsd client for "
                            "%(address)s: %(err)s"),
                        {'address': CONF.statsd.address,
                         'err': encodeutils.exception_to_unicode(e)})
            client = None
        return cls(client, sample_rate=CONF.statsd.sample_rate)

    def count(self, name, delta=1, rate=None):
        if rate is None:
            rate = self.sample_rate
        self._submit('incr', name, delta, rate=rate)

    def gauge(self, name, value):
        self._submit('gauge', name, value)

    def _submit(self, method, name, value, **kwargs):
        if self.client is None:
            return
        try:
            getattr(self.client, method)(name, value, **kwargs)
        except Exception as e:
            LOG.warning(_LW("Couldn't submit %(name)s to statsd: %(err)s"),
                        {'name': name,
                         'err': encodeutils.exception_to_unicode(e)})
