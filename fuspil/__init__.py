"""FuSPiL: the Fusion Pipeline.

FuSPiL runs a set of gene fusion detection tools on RNA-Seq samples,
joins their results for each sample and produces an integrated summary
of the fusions with fusion-report.

The package is organized as follows:
    * fuspil - The main module, with the command line interface.
    * config - The module to read and write the configuration file.
    * tools - The known fusion tools and the policy that decides which
              of them run, depending on the options and the reads.
    * references - The module that checks and collects the reference
                   files needed by the tools that are going to run.
    * star_fusion, arriba, ericscript, pizzly, fusioncatcher, squid -
              A module for each fusion tool, with the commands to obtain
              the list of the fusions for a sample.
    * aggregator - The join of the results of all the tools for each
                   sample.
    * summary - The integrated summary of the fusions of a sample.
    * visualization - The optional FusionInspector and Arriba drawing
                      stages.
    * runner - The module that runs a whole analysis on a pool of
               processes.
    * core - The package with the basic building blocks.
    * db - A package to store the results into a MongoDB.
"""
