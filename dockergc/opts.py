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

__all__ = [
    'list_opts',
]

import copy
import itertools

import dockergc.metrics
import dockergc.reclaimer
import dockergc.runtime


_opts = [
    (None, list(itertools.chain(
        dockergc.reclaimer.reclaimer_opts,
        dockergc.reclaimer.reclaimer_cmd_opts,
        dockergc.reclaimer.reclaimer_cmd_cli_opts))),
    ('docker', dockergc.runtime.docker_opts),
    ('statsd', dockergc.metrics.statsd_opts),
]


def list_opts():
    """Return a list of oslo_config options available in docker-gc.

    The returned list includes all oslo_config options which may be
    registered at runtime by the project.

    Each element of the list is a tuple. The first element is the name of
    the group under which the list of elements in the second element will
    be registered. A group name of None corresponds to the [DEFAULT] group
    in config files.

    This function is also discoverable via the 'oslo.config.opts' entry
    point under the 'dockergc' namespace.
    """
    return [(g, copy.deepcopy(o)) for g, o in _opts]
