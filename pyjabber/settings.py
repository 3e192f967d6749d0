#
# (C) Copyright 2011 Jacek Konieczny <jajcus@jajcus.net>
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU Lesser General Public License Version
# 2.1 as published by the Free Software Foundation.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU Lesser General Public License for more details.
#
# You should have received a copy of the GNU Lesser General Public
# License along with this program; if not, write to the Free Software
# Foundation, Inc., 675 Mass Ave, Cambridge, MA 02139, USA.
#

"""General settings container.

A Jabber session is controlled by a number of optional parameters: server
port, timeouts, buffer sizes, the debug observer, etc. Passing all of them
through constructor arguments would only mess up the API.

Instead an `XMPPSettings` object is passed around. It behaves like
a dictionary, but provides the registered defaults for the parameters not
set explicitly. Each module registers the settings it uses with
`XMPPSettings.add_setting`.
"""

__docformat__ = "restructuredtext en"

from collections.abc import MutableMapping

class _SettingDefinition(object):
    """Definition of a registered setting."""
    # pylint: disable=R0902,R0903,W0622
    def __init__(self, name, type = str, default = None, factory = None,
                        cache = False, doc = None, validator = None,
                        basic = False):
        self.name = name
        self.type = type
        self.default = default
        self.factory = factory
        self.cache = cache
        self.doc = doc
        self.basic = basic
        self.validator = validator

class XMPPSettings(MutableMapping):
    """Container for various parameters used all over PyJabber.

    It can be used like a regular dictionary, but will provide reasonable
    defaults for parameters which are not explicitly set.

    :CVariables:
        - `_defs`: registered setting definitions
    :Ivariables:
        - `_settings`: current values of the parameters explicitly set.
    """
    _defs = {}
    def __init__(self, data = None):
        """Create settings, optionally initialized with `data`.

        :Parameters:
            - `data`: initial data
        :Types:
            - `data`: any mapping, including `XMPPSettings`
        """
        self._settings = {}
        if data is not None:
            for key, value in dict(data).items():
                self[key] = value

    def __len__(self):
        """Number of parameters set."""
        return len(self._settings)

    def __iter__(self):
        """Iterate over the names of parameters set."""
        return iter(self._settings)

    def __contains__(self, key):
        """Check if a parameter is set."""
        return key in self._settings

    def __getitem__(self, key):
        """Get a parameter value. Return the registered default if no value
        is set.

        :Raise `KeyError`: for an unknown, unset parameter.
        """
        return self.get(key, required = True)

    def __setitem__(self, key, value):
        """Set a parameter value.

        The value is passed through the validator of the setting, if one was
        registered.

        :Raise `ValueError`: when the validator rejects the value.
        """
        setting_def = self._defs.get(key)
        if setting_def is not None and setting_def.validator is not None \
                                                        and value is not None:
            value = setting_def.validator(value)
        self._settings[str(key)] = value

    def __delitem__(self, key):
        """Unset a parameter value."""
        del self._settings[key]

    def __repr__(self):
        return "XMPPSettings({0!r})".format(self._settings)

    def get(self, key, local_default = None, required = False):
        """Get a parameter value.

        If parameter is not set, return `local_default` if it is not `None`
        or the registered default otherwise.

        :Raise `KeyError`: if parameter has no value, no default and
            `required` is `True`.

        :Return: parameter value
        """
        # pylint: disable=W0221
        if key in self._settings:
            return self._settings[key]
        if local_default is not None:
            return local_default
        if key in self._defs:
            setting_def = self._defs[key]
            if setting_def.default is not None:
                return setting_def.default
            factory = setting_def.factory
            if factory is None:
                return None
            value = factory(self)
            if setting_def.cache is True:
                setting_def.default = value
            return value
        if required:
            raise KeyError(key)
        return local_default

    @classmethod
    def add_setting(cls, name, **kwargs):
        """Register a new setting.

        Registering the same name twice is allowed only with the same
        type, default and factory.

        :Parameters:
            - `name`: the setting name
            - `kwargs`: `_SettingDefinition` arguments (`type`, `default`,
              `factory`, `cache`, `doc`, `validator`, `basic`)
        """
        setting_def = _SettingDefinition(name, **kwargs)
        if name not in cls._defs:
            cls._defs[name] = setting_def
            return
        duplicate = cls._defs[name]
        if duplicate.type != setting_def.type:
            raise ValueError("Setting duplicate, with a different type")
        if duplicate.default != setting_def.default:
            raise ValueError("Setting duplicate, with a different default")
        if duplicate.factory != setting_def.factory:
            raise ValueError("Setting duplicate, with a different factory")

    @classmethod
    def get_doc(cls, name):
        """Return the documentation string of a registered setting."""
        return cls._defs[name].doc

    @staticmethod
    def validate_positive_int(value):
        """Validator accepting integers greater than zero."""
        value = int(value)
        if value <= 0:
            raise ValueError("Positive number required")
        return value

    @staticmethod
    def validate_positive_float(value):
        """Validator accepting numbers greater than zero."""
        value = float(value)
        if value <= 0:
            raise ValueError("Positive number required")
        return value

    @staticmethod
    def get_int_range_validator(start, stop):
        """Return a validator accepting integers from the <`start`, `stop`)
        range."""
        def validate_int_range(value):
            """Range validator."""
            value = int(value)
            if value >= start and value < stop:
                return value
            raise ValueError("Not in <{0},{1}) range".format(start, stop))
        return validate_int_range

# vi: sts=4 et sw=4
