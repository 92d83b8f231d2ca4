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

"""docker-gc exception subclasses"""

from dockergc.i18n import _

_FATAL_EXCEPTION_FORMAT_ERRORS = False


class DockerGCException(Exception):
    """
    Base docker-gc Exception

    To correctly use this class, inherit from it and define
    a 'message' property. That message will get printf'd
    with the keyword arguments provided to the constructor.
    """
    message = _("An unknown exception occurred")

    def __init__(self, message=None, *args, **kwargs):
        if not message:
            message = self.message
        try:
            if kwargs:
                message = message % kwargs
        except Exception:
            if _FATAL_EXCEPTION_FORMAT_ERRORS:
                raise
            else:
                # at least get the core message out if something happened
                pass
        self.msg = message
        super(DockerGCException, self).__init__(message)

    def __str__(self):
        return str(self.msg)


class RuntimeUnavailable(DockerGCException):
    message = _("Container runtime at %(url)s is not reachable: %(reason)s")


class RuntimeAPIError(DockerGCException):
    message = _("Container runtime API call %(call)s failed: %(reason)s")


class InventoryUnavailable(DockerGCException):
    message = _("Unable to list %(kind)s inventory: %(reason)s")


class DeletionFailed(DockerGCException):
    message = _("Unable to delete %(kind)s %(id)s: %(reason)s")


class ProbeFailed(DockerGCException):
    message = _("Unable to read used disk space of %(path)s: %(reason)s")


class InvalidPolicy(DockerGCException):
    message = _("Invalid reclamation policy: %(reason)s")


class InvalidCommand(DockerGCException):
    message = _("%(command)s is not a valid command. Valid commands are: "
                "%(choices)s")
