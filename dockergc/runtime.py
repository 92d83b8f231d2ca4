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
Adapter around the Docker Engine API.

Everything the reclaimer needs from the container runtime goes through
RuntimeClient, which converts SDK errors into RuntimeUnavailable and
RuntimeAPIError so callers only ever deal with docker-gc exceptions.
"""

import functools
import math
import os

import docker
from docker import errors as docker_errors
from oslo_config import cfg
from oslo_log import log as logging
from oslo_utils import encodeutils
import requests

from dockergc.common import exception
from dockergc.common import timeutils
from dockergc.i18n import _, _LE

LOG = logging.getLogger(__name__)

docker_opts = [
    cfg.StrOpt('url',
               default='unix:///var/run/docker.sock',
               help=_("""
URL of the Docker Engine API.

Possible values:
    * A unix socket URL such as ``unix:///var/run/docker.sock``
    * A TCP URL such as ``tcp://127.0.0.1:2375``

""")),
    cfg.IntOpt('timeout', default=60, min=1,
               help=_("""
Timeout, in seconds, applied to every Docker API call.

A reclamation run never waits on the runtime for longer than this per
call; a call that times out is treated like any other runtime failure.

""")),
    cfg.StrOpt('api_version', default='auto',
               help=_("""
Docker API version to request, or ``auto`` to negotiate it with the daemon.
""")),
]

CONF = cfg.CONF
CONF.register_opts(docker_opts, group='docker')

RUNNING = 'running'
EXITED = 'exited'
DEAD = 'dead'


def _translate_errors(call):
    """Turn docker SDK and transport errors into docker-gc exceptions."""
    def decorator(f):
        @functools.wraps(f)
        def wrapper(self, *args, **kwargs):
            try:
                return f(self, *args, **kwargs)
            except docker_errors.APIError as e:
                raise exception.RuntimeAPIError(
                    call=call, reason=encodeutils.exception_to_unicode(e))
            except (requests.exceptions.RequestException,
                    docker_errors.DockerException) as e:
                raise exception.RuntimeUnavailable(
                    url=self.url, reason=encodeutils.exception_to_unicode(e))
        return wrapper
    return decorator


class RuntimeClient(object):
    """Owned handle to the container runtime."""

    def __init__(self, client, url=None):
        self.client = client
        self.url = url or getattr(client.api, 'base_url', None)

    @classmethod
    def connect(cls, url, timeout=60, version='auto'):
        try:
            client = docker.DockerClient(base_url=url, version=version,
                                         timeout=timeout)
            client.ping()
        except (requests.exceptions.RequestException,
                docker_errors.DockerException) as e:
            raise exception.RuntimeUnavailable(
                url=url, reason=encodeutils.exception_to_unicode(e))
        LOG.debug("Connected to container runtime at %s", url)
        return cls(client, url=url)

    @classmethod
    def from_conf(cls):
        return cls.connect(CONF.docker.url,
                           timeout=CONF.docker.timeout,
                           version=CONF.docker.api_version)

    @_translate_errors('images')
    def list_images(self, all=True):
        return [{'id': image['Id'],
                 'created': timeutils.to_timestamp(image.get('Created'))}
                for image in self.client.api.images(all=all)]

    @_translate_errors('containers')
    def list_containers(self, statuses):
        # The status filter ORs its values; all=True so stopped containers
        # are not hidden by the default running-only listing.
        containers = self.client.api.containers(
            all=True, filters={'status': list(statuses)})
        return [{'id': c['Id'],
                 'image': c.get('Image'),
                 'image_id': c.get('ImageID'),
                 'created': timeutils.to_timestamp(c.get('Created'))}
                for c in containers]

    @_translate_errors('inspect_container')
    def inspect_container(self, container_id):
        data = self.client.api.inspect_container(container_id)
        state = data.get('State') or {}
        return {'id': data['Id'],
                'created': timeutils.to_timestamp(data.get('Created')),
                'finished_at': timeutils.to_timestamp(
                    state.get('FinishedAt')),
                'running': bool(state.get('Running'))}

    @_translate_errors('history')
    def image_history(self, image):
        return [layer['Id'] for layer in self.client.api.history(image)
                if layer.get('Id') and layer['Id'] != '<missing>']

    @_translate_errors('remove_image')
    def remove_image(self, image_id, force=True):
        # noprune: untagged parents are reclaimed on their own TTL
        self.client.api.remove_image(image_id, force=force, noprune=True)

    @_translate_errors('remove_container')
    def remove_container(self, container_id):
        self.client.api.remove_container(container_id)

    @_translate_errors('info')
    def info(self):
        return {'root_dir': self.client.api.info().get('DockerRootDir')}


def percent_used(free, total):
    """Used space in whole percent, rounded down."""
    return int(math.floor(100 * (1 - float(free) / float(total))))


class DiskSpaceFetcher(object):
    """Reads used space of the filesystem holding the runtime root."""

    def __init__(self, runtime, path=None):
        self.runtime = runtime
        self._path = path

    @property
    def path(self):
        if self._path is None:
            try:
                root = self.runtime.info()['root_dir']
            except exception.DockerGCException as e:
                raise exception.ProbeFailed(
                    path='<runtime root>',
                    reason=encodeutils.exception_to_unicode(e))
            if not root:
                raise exception.ProbeFailed(
                    path='<runtime root>',
                    reason=_('runtime did not report a root directory'))
            self._path = root
        return self._path

    def used_space_percent(self):
        path = self.path
        try:
            st = os.statvfs(path)
        except OSError as e:
            LOG.error(_LE("Getting used disk space of %(path)s failed: "
                          "%(err)s"),
                      {'path': path,
                       'err': encodeutils.exception_to_unicode(e)})
            raise exception.ProbeFailed(
                path=path, reason=encodeutils.exception_to_unicode(e))

        total = st.f_frsize * st.f_blocks
        if total <= 0:
            raise exception.ProbeFailed(path=path,
                                        reason=_('filesystem reports no '
                                                 'blocks'))
        return percent_used(st.f_frsize * st.f_bfree, total)
