"""
The core of FuSPiL.

The modules contained in this package are the building blocks used by the tool stages and by the runner. Adding a new fusion tool should not involve changing the modules of 'core'.

The modules contained in this package are the following:
    * sample - The samples of a run, with their reads, and the discovery of the FASTQ files.
    * result - The outcome of a tool for a sample.
    * analysis - The information that needs to be shared between the different commands of a stage for a sample.
    * executor - The class responsible to run each external command of the stages.
    * stage - The generic contract of a fusion tool stage.
    * utils - A set of utility functions.
    * exceptions - A small set of custom exceptions.
"""
