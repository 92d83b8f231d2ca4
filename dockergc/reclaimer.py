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

from oslo_config import cfg
from oslo_log import log as logging
from oslo_utils import encodeutils

from dockergc.common import exception
from dockergc.common import timeutils
from dockergc import inventory
from dockergc.i18n import _, _LE, _LI, _LW

LOG = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10

IMAGES = 'images'
CONTAINERS = 'containers'
ALL = 'all'
EMERGENCY = 'emergency'
TTL = 'ttl'
DISKSPACE = 'diskspace'
COMMANDS = (IMAGES, CONTAINERS, ALL, EMERGENCY, TTL, DISKSPACE)
SCHEDULED_COMMANDS = (TTL, DISKSPACE)

# Outcome states of a disk space run
IDLE = 'idle'
DONE = 'done'
STALLED = 'stalled'
ABORTED = 'aborted'

reclaimer_opts = [
    cfg.IntOpt('images_ttl', default=10 * 60 * 60, min=0,
               help=_("""
How long, in seconds, unused images are kept.

An image that no running container depends on is deleted once it is older
than this. In ``diskspace`` mode only images older than this are eligible
for batch deletion.

Possible values:
    * Any non-negative integer

Related options:
    * ``containers_ttl``

""")),
    cfg.IntOpt('containers_ttl', default=60, min=0,
               help=_("""
How long, in seconds, stopped containers are kept after they exited.

Containers that never recorded an exit time are aged from their creation
time instead.

Possible values:
    * Any non-negative integer

""")),
    cfg.IntOpt('high_disk_space_threshold', default=85, min=0, max=100,
               help=_("""
Used disk space, in percent, at which ``diskspace`` mode starts deleting
images.

Related options:
    * ``low_disk_space_threshold``

""")),
    cfg.IntOpt('low_disk_space_threshold', default=50, min=0, max=100,
               help=_("""
Used disk space, in percent, at or below which ``diskspace`` mode stops
deleting images. Must not be greater than ``high_disk_space_threshold``.

""")),
    cfg.IntOpt('batch_size', default=DEFAULT_BATCH_SIZE, min=1,
               help=_("""
Number of images deleted between two disk space measurements in
``diskspace`` mode.

""")),
]

reclaimer_cmd_opts = [
    cfg.IntOpt('interval', default=60, min=1,
               help=_("""
Time interval, in seconds, between runs of the ``ttl`` and ``diskspace``
commands.

""")),
]

reclaimer_cmd_cli_opts = [
    cfg.StrOpt('command',
               short='c',
               default=TTL,
               choices=COMMANDS,
               help=_("""
What to clean.

Possible values:
    * ``images``: delete unused images older than ``images_ttl`` once
    * ``containers``: delete stopped containers older than
      ``containers_ttl`` once
    * ``all``: both of the above once
    * ``emergency``: delete every stopped container and unused image once
    * ``ttl``: run ``all`` every ``interval`` seconds
    * ``diskspace``: every ``interval`` seconds, delete old containers and,
      above ``high_disk_space_threshold``, the oldest images until used
      space is back to ``low_disk_space_threshold``

""")),
]

CONF = cfg.CONF
CONF.register_opts(reclaimer_opts)
CONF.register_opts(reclaimer_cmd_opts)
CONF.register_cli_opts(reclaimer_cmd_cli_opts)


class ReclamationPolicy(collections.namedtuple(
        'ReclamationPolicy', ['ttl_containers', 'ttl_images',
                              'high_water_mark', 'low_water_mark'])):
    """What to keep: TTLs in seconds and used disk space in percent."""

    __slots__ = ()

    def __new__(cls, ttl_containers, ttl_images,
                high_water_mark=100, low_water_mark=0):
        if ttl_containers < 0 or ttl_images < 0:
            raise exception.InvalidPolicy(
                reason=_("TTLs must not be negative"))
        for mark in (high_water_mark, low_water_mark):
            if not 0 <= mark <= 100:
                raise exception.InvalidPolicy(
                    reason=_("disk space thresholds must be percentages "
                             "between 0 and 100, got %s") % mark)
        if low_water_mark > high_water_mark:
            raise exception.InvalidPolicy(
                reason=_("low disk space threshold %(low)s is above high "
                         "disk space threshold %(high)s") %
                {'low': low_water_mark, 'high': high_water_mark})
        return super(ReclamationPolicy, cls).__new__(
            cls, ttl_containers, ttl_images, high_water_mark, low_water_mark)

    @classmethod
    def from_conf(cls):
        return cls(ttl_containers=CONF.containers_ttl,
                   ttl_images=CONF.images_ttl,
                   high_water_mark=CONF.high_disk_space_threshold,
                   low_water_mark=CONF.low_disk_space_threshold)

    def emergency(self):
        return self._replace(ttl_containers=0, ttl_images=0)


class CleanupOutcome(object):
    def __init__(self, removed_containers=0, removed_images=0, state=DONE,
                 batches=0, iterations=0):
        self.removed_containers = removed_containers
        self.removed_images = removed_images
        self.state = state
        self.batches = batches
        self.iterations = iterations

    def __repr__(self):
        return ('CleanupOutcome(removed_containers=%(removed_containers)d, '
                'removed_images=%(removed_images)d, state=%(state)s, '
                'batches=%(batches)d, iterations=%(iterations)d)'
                % self.__dict__)


class Reclaimer(object):
    """Decides what to delete, in which order, and when to stop."""

    def __init__(self, runtime, metrics, disk_space=None,
                 batch_size=DEFAULT_BATCH_SIZE):
        self.runtime = runtime
        self.metrics = metrics
        self.disk_space = disk_space
        self.batch_size = batch_size
        self.inventory = inventory.Inventory(runtime, metrics)

    def _remove(self, kind, item_id):
        try:
            if kind == inventory.IMAGE:
                # force: tagged images go without untagging them first
                self.runtime.remove_image(item_id, force=True)
            elif kind == inventory.CONTAINER:
                self.runtime.remove_container(item_id)
            else:
                LOG.error(_LE("Refusing to remove %(id)s of unknown kind "
                              "%(kind)s"), {'id': item_id, 'kind': kind})
                return False
        except exception.DockerGCException as e:
            failure = exception.DeletionFailed(
                kind=kind, id=item_id,
                reason=encodeutils.exception_to_unicode(e))
            LOG.error(failure.msg)
            return False

        self.metrics.count('%s.deleted' % kind)
        return True

    def reclaim_by_age(self, snapshot, kind, keep_duration):
        """Delete everything in snapshot older than keep_duration seconds.

        Oldest timestamps go first. Returns how many deletions succeeded.
        """
        removed = 0
        now = timeutils.now_ts()
        for timestamp in inventory.sorted_timestamps(snapshot):
            age = now - timestamp
            if age <= keep_duration:
                continue
            for item_id in snapshot[timestamp]:
                LOG.info(_LI("Trying to delete %(kind)s %(id)s: age "
                             "%(age)s, threshold %(threshold)s, expired "
                             "%(expires)s ago"),
                         {'kind': kind, 'id': item_id,
                          'age': timeutils.delta_seconds(age),
                          'threshold': timeutils.delta_seconds(keep_duration),
                          'expires': timeutils.delta_seconds(
                              age - keep_duration)})
                if self._remove(kind, item_id):
                    removed += 1
        return removed

    def clean_images(self, ttl):
        return self.reclaim_by_age(
            self.inventory.list_reclaimable(inventory.IMAGE),
            inventory.IMAGE, ttl)

    def clean_containers(self, ttl):
        return self.reclaim_by_age(
            self.inventory.list_reclaimable(inventory.CONTAINER),
            inventory.CONTAINER, ttl)

    def clean_all(self, policy):
        LOG.info(_LI("Cleaning all images and containers"))
        self.metrics.count('clean.start')
        # Containers first: their removal can free images for this run.
        outcome = CleanupOutcome(
            removed_containers=self.clean_containers(policy.ttl_containers))
        outcome.removed_images = self.clean_images(policy.ttl_images)
        LOG.info(_LI("Cleaning finished: removed %(containers)d containers "
                     "and %(images)d images"),
                 {'containers': outcome.removed_containers,
                  'images': outcome.removed_images})
        return outcome

    def _next_batch(self, ttl):
        """Return the oldest expired images and how many expired in total."""
        snapshot = self.inventory.list_reclaimable(inventory.IMAGE)
        cutoff = timeutils.now_ts() - ttl
        expired = dict((timestamp, ids) for timestamp, ids in snapshot.items()
                       if timestamp < cutoff)
        batch = collections.defaultdict(list)
        for timestamp, image_id in inventory.oldest_first(
                expired)[:self.batch_size]:
            batch[timestamp].append(image_id)
        return dict(batch), inventory.count_items(expired)

    def _probe(self):
        if self.disk_space is None:
            LOG.error(_LE("Reading disk space failed: no disk space probe "
                          "configured"))
            return None
        try:
            return self.disk_space.used_space_percent()
        except exception.DockerGCException as e:
            LOG.error(_LE("Reading disk space failed: %s"),
                      encodeutils.exception_to_unicode(e))
            return None

    def reclaim_until_below_threshold(self, policy):
        """Delete the oldest images in batches until disk pressure is gone.

        Stopped containers are always swept on their own TTL. Images are
        only touched once used space reaches the high water mark, and then
        only until it is at or below the low water mark, the inventory runs
        out, or a batch makes no progress.
        """
        outcome = CleanupOutcome(state=IDLE)
        used = self._probe()
        if used is None:
            outcome.state = ABORTED
            return outcome

        marks = {'used': used, 'high': policy.high_water_mark,
                 'low': policy.low_water_mark}
        if used < policy.high_water_mark:
            LOG.info(_LI("Used disk space %(used)d%% is below %(high)d%%, "
                         "cleaning only containers based on TTL"), marks)
            outcome.removed_containers = self.clean_containers(
                policy.ttl_containers)
            return outcome

        LOG.info(_LI("Used disk space %(used)d%% reached %(high)d%%, "
                     "cleaning images until %(low)d%%"), marks)
        self.metrics.count('clean.start')
        outcome.removed_containers = self.clean_containers(
            policy.ttl_containers)
        outcome.state = DONE

        while used > policy.low_water_mark:
            outcome.iterations += 1
            # Re-read every pass so failures from the last batch show up.
            batch, candidates = self._next_batch(policy.ttl_images)
            if not batch:
                if outcome.removed_images == 0:
                    outcome.state = STALLED
                LOG.info(_LI("No more images to reclaim"))
                break

            outcome.batches += 1
            batch_size = inventory.count_items(batch)
            LOG.debug("Deleting batch %(batch)d of %(count)d images",
                      {'batch': outcome.batches, 'count': batch_size})
            removed = self.reclaim_by_age(batch, inventory.IMAGE,
                                          policy.ttl_images)
            outcome.removed_images += removed
            if removed == 0:
                LOG.warning(_LW("No image of batch %d could be deleted, "
                                "giving up until the next run"),
                            outcome.batches)
                outcome.state = STALLED
                break
            if removed == candidates:
                # Every expired image is gone; another pass would find none.
                LOG.info(_LI("No more images to reclaim"))
                break

            used = self._probe()
            if used is None:
                outcome.state = ABORTED
                break

        LOG.info(_LI("Cleaning images finished: %(outcome)r, used disk "
                     "space %(used)s%%"), {'outcome': outcome, 'used': used})
        return outcome

    def run(self, command, policy):
        """Run one of the one-shot or scheduled commands once."""
        if command == IMAGES:
            return CleanupOutcome(
                removed_images=self.clean_images(policy.ttl_images))
        if command == CONTAINERS:
            return CleanupOutcome(
                removed_containers=self.clean_containers(
                    policy.ttl_containers))
        if command in (ALL, TTL):
            return self.clean_all(policy)
        if command == EMERGENCY:
            return self.clean_all(policy.emergency())
        if command == DISKSPACE:
            return self.reclaim_until_below_threshold(policy)
        raise exception.InvalidCommand(command=command,
                                       choices=', '.join(COMMANDS))
