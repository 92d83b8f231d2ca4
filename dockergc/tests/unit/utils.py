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

import collections

from dockergc.common import exception
from dockergc.common import timeutils
from dockergc import runtime

ROOT_DIR = '/var/lib/docker'


def ago(seconds):
    return int(timeutils.now_ts() - seconds)


class FakeRuntime(object):
    """In-memory container runtime."""

    def __init__(self):
        self.images = collections.OrderedDict()
        self.containers = collections.OrderedDict()
        self.history = {}
        self.removed_images = []
        self.removed_containers = []
        self.failing_removals = set()
        self.failing_inspects = set()
        self.failing_history = set()
        self.unavailable = set()
        self.image_listings = 0

    def add_image(self, image_id, age, parents=()):
        self.images[image_id] = ago(age)
        self.history[image_id] = [image_id] + list(parents)

    def add_container(self, container_id, age, status=runtime.EXITED,
                      image=None, finished_age=None):
        self.containers[container_id] = {
            'id': container_id,
            'image': image,
            'image_id': image,
            'created': ago(age),
            'finished_at': (ago(finished_age)
                            if finished_age is not None else None),
            'status': status,
        }

    def _check(self, call):
        if call in self.unavailable:
            raise exception.RuntimeUnavailable(url='unix:///fake.sock',
                                               reason='connection refused')

    def list_images(self, all=True):
        self._check('images')
        self.image_listings += 1
        return [{'id': image_id, 'created': created}
                for image_id, created in self.images.items()]

    def list_containers(self, statuses):
        self._check('containers')
        return [dict((k, c[k]) for k in ('id', 'image', 'image_id',
                                         'created'))
                for c in self.containers.values() if c['status'] in statuses]

    def inspect_container(self, container_id):
        if container_id in self.failing_inspects:
            raise exception.RuntimeAPIError(call='inspect_container',
                                            reason='boom')
        c = self.containers[container_id]
        return {'id': container_id, 'created': c['created'],
                'finished_at': c['finished_at'],
                'running': c['status'] == runtime.RUNNING}

    def image_history(self, image):
        if image in self.failing_history:
            raise exception.RuntimeAPIError(call='history', reason='boom')
        return list(self.history.get(image, []))

    def remove_image(self, image_id, force=True):
        if image_id in self.failing_removals or image_id not in self.images:
            raise exception.RuntimeAPIError(call='remove_image',
                                            reason='conflict')
        del self.images[image_id]
        self.removed_images.append(image_id)

    def remove_container(self, container_id):
        if (container_id in self.failing_removals or
                container_id not in self.containers):
            raise exception.RuntimeAPIError(call='remove_container',
                                            reason='conflict')
        del self.containers[container_id]
        self.removed_containers.append(container_id)

    def info(self):
        self._check('info')
        return {'root_dir': ROOT_DIR}


class FakeDiskSpace(object):
    """Returns the given readings in order, then repeats the last one."""

    def __init__(self, *readings):
        self.readings = list(readings)
        self.calls = 0

    def used_space_percent(self):
        self.calls += 1
        value = self.readings[0]
        if len(self.readings) > 1:
            self.readings.pop(0)
        if isinstance(value, Exception):
            raise value
        return value


class FakeMetrics(object):
    def __init__(self):
        self.counts = collections.Counter()
        self.gauges = {}

    def count(self, name, delta=1, rate=None):
        self.counts[name] += delta

    def gauge(self, name, value):
        self.gauges[name] = value
