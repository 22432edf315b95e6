"""Layout of the flat optimization vector."""

from collections import namedtuple

import numpy as np

from cioplan.exceptions import PreconditionViolation


FieldSpec = namedtuple('FieldSpec', ['kind', 'row', 'offset', 'size'])
FieldSpec.__doc__ = """One contiguous field of the optimization vector.

kind is 'positions', 'velocities' or 'contacts'. row indexes the free
waypoint for joint fields and the contact phase for contact fields.
"""

POSITIONS = 'positions'
VELOCITIES = 'velocities'
CONTACTS = 'contacts'


class OptimizationVectorSchema(object):
    """Field list shared by everything that packs or unpacks the vector.

    The order is the contact activations of phase 0, then for every free
    waypoint ``i`` its joint positions, its joint velocities and the
    contact activations of phase ``i + 1`` while such a phase exists.
    With a contact phase stride of 1 every free waypoint carries one
    phase.

    Parameters
    ----------
    n_free : int
        Number of free waypoints.
    n_joints : int
        Number of group joints.
    n_contacts : int
        Number of contacts.
    n_contact_phases : int, optional
        Number of contact phases, at most ``n_free + 1``. Defaults to
        ``n_free + 1``.
    """

    def __init__(self, n_free, n_joints, n_contacts, n_contact_phases=None):
        if n_contact_phases is None:
            n_contact_phases = n_free + 1
        if not 1 <= n_contact_phases <= n_free + 1:
            raise ValueError(
                'n_contact_phases must be in [1, {}], got {}'.format(
                    n_free + 1, n_contact_phases))
        self.n_free = n_free
        self.n_joints = n_joints
        self.n_contacts = n_contacts
        self.n_contact_phases = n_contact_phases
        layout = [(CONTACTS, 0, n_contacts)]
        for i in range(n_free):
            layout.append((POSITIONS, i, n_joints))
            layout.append((VELOCITIES, i, n_joints))
            if i + 1 < n_contact_phases:
                layout.append((CONTACTS, i + 1, n_contacts))
        fields = []
        offset = 0
        for kind, row, size in layout:
            fields.append(FieldSpec(kind, row, offset, size))
            offset += size
        self.fields = tuple(fields)
        self.size = offset

    @classmethod
    def from_store(cls, store):
        return cls(store.n_free, store.n_joints, store.n_contacts,
                   store.n_contact_phases)

    def __len__(self):
        return self.size

    def __repr__(self):
        return '<OptimizationVectorSchema free={} joints={} contacts={} ' \
            'phases={} size={}>'.format(self.n_free, self.n_joints,
                                         self.n_contacts,
                                         self.n_contact_phases, self.size)

    def _blocks(self, positions, velocities, contacts):
        return {POSITIONS: positions, VELOCITIES: velocities,
                CONTACTS: contacts}

    def _check_blocks(self, positions, velocities, contacts):
        joint_shape = (self.n_free, self.n_joints)
        contact_shape = (self.n_contact_phases, self.n_contacts)
        if np.shape(positions) != joint_shape \
           or np.shape(velocities) != joint_shape \
           or np.shape(contacts) != contact_shape:
            raise PreconditionViolation(
                'Block shapes {}, {}, {} do not match {}, {}, {}'.format(
                    np.shape(positions), np.shape(velocities),
                    np.shape(contacts), joint_shape, joint_shape,
                    contact_shape))

    def pack(self, positions, velocities, contacts, out=None):
        """Pack the free blocks into a flat vector.

        Parameters
        ----------
        positions : numpy.ndarray
            Free joint positions (n_free, n_joints).
        velocities : numpy.ndarray
            Free joint velocities (n_free, n_joints).
        contacts : numpy.ndarray
            Contact activations (n_contact_phases, n_contacts).
        out : numpy.ndarray, optional
            Destination vector.

        Returns
        -------
        numpy.ndarray
            Vector of length ``size``.
        """
        self._check_blocks(positions, velocities, contacts)
        if out is None:
            out = np.empty(self.size)
        blocks = self._blocks(positions, velocities, contacts)
        for f in self.fields:
            out[f.offset:f.offset + f.size] = blocks[f.kind][f.row]
        return out

    def pack_store(self, store, out=None):
        return self.pack(store.free_positions, store.free_velocities,
                         store.contacts, out=out)

    def unpack(self, vector, positions, velocities, contacts):
        """Scatter a flat vector into the free blocks in place.

        Contact activations are magnitudes; their absolute value is
        written.

        Raises
        ------
        PreconditionViolation
            If the vector or a block has the wrong size.
        """
        if np.shape(vector) != (self.size,):
            raise PreconditionViolation(
                'Optimization vector shape {} does not match ({},)'.format(
                    np.shape(vector), self.size))
        self._check_blocks(positions, velocities, contacts)
        blocks = self._blocks(positions, velocities, contacts)
        for f in self.fields:
            values = vector[f.offset:f.offset + f.size]
            if f.kind == CONTACTS:
                values = np.abs(values)
            blocks[f.kind][f.row] = values
        return positions, velocities, contacts
