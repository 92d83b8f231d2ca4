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
Routines for configuring docker-gc
"""

from oslo_config import cfg
from oslo_log import log as logging

from dockergc.version import cached_version_string

CONF = cfg.CONF

_DEFAULT_LOG_LEVELS = ['urllib3.connectionpool=WARN', 'docker=WARN',
                       'iso8601=WARN']


def parse_args(args=None, usage=None, default_config_files=None):
    CONF(args=args,
         project='dockergc',
         prog='docker-gc',
         version=cached_version_string(),
         usage=usage,
         default_config_files=default_config_files)


def set_config_defaults():
    """This method updates all configuration default values."""
    logging.set_defaults(
        default_log_levels=logging.get_default_log_levels() +
        _DEFAULT_LOG_LEVELS)
    CONF.set_default(name='use_stderr', default=True)
