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
Point-in-time view of what the runtime could reclaim.

A snapshot maps a timestamp (seconds since the epoch) to the ids of the
entities stamped with it. Snapshots are rebuilt on every call and never
cached, so a run always sees the runtime as it is now.
"""

import collections

from oslo_log import log as logging
from oslo_utils import encodeutils

from dockergc.common import exception
from dockergc import runtime as runtime_api
from dockergc.i18n import _LE

LOG = logging.getLogger(__name__)

CONTAINER = 'container'
IMAGE = 'image'


def sorted_timestamps(snapshot):
    return sorted(snapshot)


def oldest_first(snapshot):
    """Flatten a snapshot into (timestamp, id) pairs, oldest first."""
    return [(timestamp, item_id)
            for timestamp in sorted_timestamps(snapshot)
            for item_id in sorted(snapshot[timestamp])]


def count_items(snapshot):
    return sum(len(ids) for ids in snapshot.values())


class Inventory(object):
    def __init__(self, runtime, metrics):
        self.runtime = runtime
        self.metrics = metrics

    def _unavailable(self, kind, err):
        e = exception.InventoryUnavailable(
            kind=kind, reason=encodeutils.exception_to_unicode(err))
        LOG.error(e.msg)

    def list_reclaimable(self, kind):
        if kind == CONTAINER:
            return self.finished_containers()
        if kind == IMAGE:
            return self.unused_images()
        raise ValueError("unknown inventory kind %r" % kind)

    def finished_containers(self):
        """Exited and dead containers keyed by exit time.

        Containers that never recorded an exit time fall back to their
        creation time.
        """
        snapshot = collections.defaultdict(list)
        try:
            finished = self.runtime.list_containers(
                [runtime_api.EXITED, runtime_api.DEAD])
        except exception.DockerGCException as e:
            self._unavailable(CONTAINER, e)
            return {}

        for container in finished:
            try:
                details = self.runtime.inspect_container(container['id'])
            except exception.DockerGCException as e:
                LOG.error(_LE("Fetching details of container %(id)s "
                              "failed: %(err)s"),
                          {'id': container['id'],
                           'err': encodeutils.exception_to_unicode(e)})
                continue
            if details.get('running'):
                continue
            timestamp = details.get('finished_at')
            if timestamp is None:
                timestamp = details.get('created') or container['created']
            if timestamp is None:
                LOG.warning("Container %s has no usable timestamp, "
                            "skipping", container['id'])
                continue
            snapshot[timestamp].append(details['id'])

        self.metrics.gauge('container.dead.amount', len(finished))
        return dict(snapshot)

    def running_containers(self):
        try:
            return self.runtime.list_containers([runtime_api.RUNNING])
        except exception.DockerGCException as e:
            self._unavailable('running container', e)
            return []

    def used_images(self):
        """Ids of every image a running container depends on.

        Includes the whole ancestry chain of each running container's
        image. A container whose history cannot be read only contributes
        its own image reference.
        """
        used = set()
        for container in self.running_containers():
            refs = [ref for ref in (container.get('image'),
                                    container.get('image_id')) if ref]
            used.update(refs)
            if not refs:
                continue
            try:
                used.update(self.runtime.image_history(refs[-1]))
            except exception.DockerGCException as e:
                LOG.error(_LE("Getting image history of %(image)s for "
                              "container %(id)s failed: %(err)s"),
                          {'image': refs[-1], 'id': container['id'],
                           'err': encodeutils.exception_to_unicode(e)})
        return used

    def unused_images(self):
        """Images keyed by creation time, minus those in use."""
        snapshot = collections.defaultdict(list)
        try:
            images = self.runtime.list_images(all=True)
        except exception.DockerGCException as e:
            self._unavailable(IMAGE, e)
            return {}

        used = self.used_images()
        for image in images:
            if image['id'] in used or image['created'] is None:
                continue
            snapshot[image['created']].append(image['id'])

        self.metrics.gauge('image.amount', len(images))
        return dict(snapshot)
