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

import eventlet
from oslo_log import log as logging

from dockergc.i18n import _LE, _LI

LOG = logging.getLogger(__name__)


class Daemon(object):
    """Fires an application every wakeup_time seconds until stopped.

    The first run happens as soon as the daemon starts. Runs are spawned on
    a green thread pool and are not serialised: a run that outlasts the
    interval overlaps with the next one.
    """

    def __init__(self, wakeup_time=60, threads=100):
        LOG.info(_LI("Starting Daemon: wakeup_time=%(wakeup_time)s "
                     "threads=%(threads)s"),
                 {'wakeup_time': wakeup_time, 'threads': threads})
        self.wakeup_time = wakeup_time
        self.event = eventlet.event.Event()
        # This pool is used for periodic runs of the application
        self.daemon_pool = eventlet.greenpool.GreenPool(threads)
        self._timer = None
        self._stopped = False

    def start(self, application):
        if self.event.ready():
            # Restarted after stop(): wait() must block again
            self.event = eventlet.event.Event()
        self._stopped = False
        self._run(application)

    def stop(self):
        """Cancel future runs; a run already in progress completes."""
        self._stopped = True
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        if not self.event.ready():
            self.event.send()
        LOG.info(_LI("Daemon stopped"))

    def wait(self):
        try:
            self.event.wait()
        except KeyboardInterrupt:
            msg = _LI("Daemon Shutdown on KeyboardInterrupt")
            LOG.info(msg)
            self.stop()

    @property
    def running(self):
        return not self._stopped

    def _run(self, application):
        if self._stopped:
            return
        LOG.debug("Running application")
        self.daemon_pool.spawn_n(self._run_application, application)
        self._timer = eventlet.spawn_after(self.wakeup_time, self._run,
                                           application)
        LOG.debug("Next run scheduled in %s seconds", self.wakeup_time)

    @staticmethod
    def _run_application(application):
        try:
            application()
        except Exception:
            LOG.exception(_LE("Scheduled run failed"))
