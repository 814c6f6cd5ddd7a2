"""
# PNG chunks for humans.

A file format is described declaratively: a Chunk subclass lists its fields
in order and each field knows how to represent itself as bytes.

Two basic main operations are defined for the file format and its sub components:

 1. unpack(): read the binary data and build a high-level representation of it.
    The actual offset of the stream is used and the chunk itself knows how many
    bytes needs to read to finalize the representation

 2. pack(): encode the high-level representation into binary data.

to these we add one more

 3. relayout(): trigger a recursive layout "negotiation" between a component
    and its subcomponents so to have offset and size set in the correct way.
    If not indicated explicitly a packing also implies a relayouting.

The PNG container lives in pngstruct.images.png: a signature followed by
chunks, each one with its own type and CRC.
"""
