#!/usr/bin/env python

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
docker-gc: reclaims stopped containers and unused images

One-shot commands (images, containers, all, emergency) run once and exit.
Scheduled commands (ttl, diskspace) run every ``interval`` seconds until
the process is stopped.
"""

import functools
import sys

import eventlet
from oslo_config import cfg
from oslo_log import log as logging

from dockergc.common import config
from dockergc.common import exception
from dockergc import daemon
from dockergc import metrics
from dockergc import reclaimer
from dockergc import runtime


CONF = cfg.CONF
logging.register_options(CONF)
config.set_config_defaults()


def main():
    try:
        config.parse_args()
        logging.setup(CONF, 'dockergc')

        policy = reclaimer.ReclamationPolicy.from_conf()

        # The runtime client must be created after patching.
        eventlet.patcher.monkey_patch()

        rt = runtime.RuntimeClient.from_conf()
        app = reclaimer.Reclaimer(rt, metrics.Emitter.from_conf(),
                                  disk_space=runtime.DiskSpaceFetcher(rt),
                                  batch_size=CONF.batch_size)

        run = functools.partial(app.run, CONF.command, policy)
        if CONF.command in reclaimer.SCHEDULED_COMMANDS:
            server = daemon.Daemon(CONF.interval)
            server.start(run)
            server.wait()
        else:
            run()
    except exception.InvalidPolicy as e:
        sys.exit("ERROR: %s" % e)
    except exception.RuntimeUnavailable as e:
        sys.exit("ERROR: %s" % e)


if __name__ == '__main__':
    main()
